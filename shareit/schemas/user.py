from pydantic import BaseModel
from typing import Optional

from shareit.domain import User

class UserIn(BaseModel):
    name: str
    email: str  # plain str to allow .local and other dev domains

class UserPatch(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None

class UserOut(BaseModel):
    id: int
    name: str
    email: str

    @classmethod
    def from_domain(cls, u: User) -> "UserOut":
        return cls(id=u.id, name=u.name, email=u.email)
