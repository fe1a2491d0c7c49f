"""
Job application actions reachable as ``/jobdata/{action}/{id}``.
"""

from typing import List, Optional

from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ....application.container import IContainer
from ....core.domain.models import JobData, JobDataUpdate
from ....core.interfaces.services import IJobDataService
from ..routing import Controller, action


class JobDataController(Controller):
    route_name = "jobdata"

    def __init__(self, container: IContainer) -> None:
        super().__init__()
        self._container = container

    @property
    def jobs(self) -> IJobDataService:
        return self._container.resolve(IJobDataService)  # type: ignore[type-abstract]

    @action("GET")
    async def index(self, request: Request, id: Optional[str]) -> List[JobData]:
        return await self.jobs.list_job_data()

    @action("GET")
    async def foruser(self, request: Request, id: Optional[str]) -> List[JobData]:
        return await self.jobs.list_for_user(self.require_id(id))

    @action("GET")
    async def details(self, request: Request, id: Optional[str]) -> JobData:
        return self.found(await self.jobs.get_job_data(self.require_id(id)), "Job application", id)

    @action("POST")
    async def create(self, request: Request, id: Optional[str]) -> Response:
        job = await self.read_body(request, JobData)
        created = await self.jobs.create_job_data(job)
        return JSONResponse(
            jsonable_encoder(created),
            status_code=201,
            headers={"Location": f"/jobdata/details/{created.id}"})

    @action("PUT")
    async def update(self, request: Request, id: Optional[str]) -> JobData:
        changes = await self.read_body(request, JobDataUpdate)
        return self.found(await self.jobs.update_job_data(self.require_id(id), changes), "Job application", id)

    @action("DELETE")
    async def delete(self, request: Request, id: Optional[str]) -> Response:
        if not await self.jobs.remove_job_data(self.require_id(id)):
            raise HTTPException(status_code=404, detail=f"Job application '{id}' not found")
        return Response(status_code=204)
