"""
User account actions reachable as ``/users/{action}/{id}``.
"""

from typing import List, Optional

from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ....application.container import IContainer
from ....core.domain.models import User, UserUpdate
from ....core.interfaces.services import IUserService
from ..routing import Controller, action


class UsersController(Controller):
    """Create, update, delete and look up user accounts."""

    route_name = "users"

    def __init__(self, container: IContainer) -> None:
        super().__init__()
        self._container = container

    @property
    def users(self) -> IUserService:
        return self._container.resolve(IUserService)  # type: ignore[type-abstract]

    @action("GET")
    async def index(self, request: Request, id: Optional[str]) -> List[User]:
        return await self.users.list_users()

    @action("GET")
    async def details(self, request: Request, id: Optional[str]) -> User:
        return self.found(await self.users.get_user(self.require_id(id)), "User", id)

    @action("GET")
    async def byusername(self, request: Request, id: Optional[str]) -> User:
        return self.found(await self.users.get_by_username(self.require_id(id)), "User", id)

    @action("GET")
    async def byemail(self, request: Request, id: Optional[str]) -> User:
        return self.found(await self.users.get_by_email(self.require_id(id)), "User", id)

    @action("POST")
    async def create(self, request: Request, id: Optional[str]) -> Response:
        user = await self.read_body(request, User)
        if await self.users.get_by_username(user.username) is not None:
            raise HTTPException(status_code=409, detail=f"Username '{user.username}' is taken")
        if await self.users.get_by_email(user.email) is not None:
            raise HTTPException(status_code=409, detail=f"Email '{user.email}' is already registered")

        created = await self.users.create_user(user)
        return JSONResponse(
            jsonable_encoder(created),
            status_code=201,
            headers={"Location": f"/users/details/{created.id}"})

    @action("PUT")
    async def update(self, request: Request, id: Optional[str]) -> User:
        changes = await self.read_body(request, UserUpdate)
        return self.found(await self.users.update_user(self.require_id(id), changes), "User", id)

    @action("DELETE")
    async def delete(self, request: Request, id: Optional[str]) -> Response:
        if not await self.users.remove_user(self.require_id(id)):
            raise HTTPException(status_code=404, detail=f"User '{id}' not found")
        return Response(status_code=204)

