from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from taskmarket.core.security import decode_access_token, user_from_claims
from taskmarket.models.schemas import CurrentUser

router = APIRouter(prefix="/auth", tags=["Authentication"])

# Clients sign in with Firebase Authentication and send the resulting ID token.
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> CurrentUser:
    claims = decode_access_token(credentials.credentials) if credentials else None
    if not claims:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_from_claims(claims)


def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


@router.get("/me", response_model=CurrentUser)
async def read_users_me(current_user: CurrentUser = Depends(get_current_user)):
    return current_user


@router.post("/logout")
async def logout():
    # ID tokens are stateless; the client signs out of Firebase and discards the token.
    return {"message": "Logout successful. Please discard your token."}
