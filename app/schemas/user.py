# app/schemas/user.py
from pydantic import BaseModel
from typing import Optional


# Пользователь, извлеченный из access token Supabase.
# Токен пробрасывается в запросы к базе, чтобы работали политики RLS.
class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None
    access_token: str
