from fastapi import Header, HTTPException, status


def get_current_household(
    x_household_id: str | None = Header(default=None),
) -> str:
    """
    DEV AUTH: pass X-Household-Id header to simulate a logged-in household member.
    Example: X-Household-Id: hh_demo
    """
    if not x_household_id or not x_household_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Household-Id header (dev auth)",
        )
    return x_household_id.strip()
