# dependencies.py
"""
Shared FastAPI dependencies: bearer token auth and notification dispatch.
"""
from fastapi import BackgroundTasks, HTTPException, Request, status
from jose import JWTError, jwt

import config
from services.notification_service import NotificationDispatcher


# Token Auth Dependency
def verify_token(request: Request) -> dict:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
     token = auth.split(" ")[1]
     try:
          payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
          return payload
     except JWTError:
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")


def get_dispatcher(background_tasks: BackgroundTasks) -> NotificationDispatcher:
     """Dispatcher that delivers after the response has been sent."""
     return NotificationDispatcher(defer=background_tasks.add_task)


def require_role(token: dict, *roles: str) -> None:
     if token.get("role") not in roles:
          raise HTTPException(
               status_code=status.HTTP_403_FORBIDDEN,
               detail="You do not have permission to perform this action",
          )
