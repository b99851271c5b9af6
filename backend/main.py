import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from clock import SystemClock, TimeSource
from event_store import JsonEventStore, StorageError
from models import ActionIn
from request_info import CountryLookup, describe_request, describe_visit
from service_actions import ActionService
from service_visits import VisitService
from settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

MISSING_ACTION_FIELDS = "Missing required parameters: name, type, and timeToAction are required"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format="%(asctime)s %(levelname)s %(name)s %(message)s")


def create_app(
    settings: Optional[Settings] = None,
    clock: Optional[TimeSource] = None,
    store: Optional[JsonEventStore] = None,
) -> FastAPI:
    """Composition root: one store, one clock and one service of each kind.

    Tests pass their own `Settings` (temp storage path) and a `FixedClock`.
    """
    settings = settings or default_settings
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.countries.close()

    app = FastAPI(title="Bare Count Collector", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store or JsonEventStore(settings.storage_path)
    app.state.clock = clock or SystemClock()
    app.state.countries = CountryLookup(settings.geoip_db_path)
    app.state.visits = VisitService(app.state.store, app.state.clock)
    app.state.actions = ActionService(app.state.store, app.state.clock)

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError):
        logger.error("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    _register_routes(app)
    return app


def get_visit_service(request: Request) -> VisitService:
    return request.app.state.visits


def get_action_service(request: Request) -> ActionService:
    return request.app.state.actions


def get_countries(request: Request) -> CountryLookup:
    return request.app.state.countries


def _peer(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def _register_routes(app: FastAPI) -> None:
    @app.get("/health")
    def health(svc: VisitService = Depends(get_visit_service)):
        try:
            svc.get_visit_counts()
            return {"ok": True}
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Storage health check failed: {e}")

    @app.get("/hit")
    def hit(
        request: Request,
        screen: Optional[str] = None,
        session_id: Optional[str] = Query(None, alias="sessionId"),
        svc: VisitService = Depends(get_visit_service),
        countries: CountryLookup = Depends(get_countries),
    ):
        info = describe_visit(request.headers, _peer(request), countries)
        session_id = svc.record_visit(session_id=session_id, screen=screen, **info)
        return {"success": True, "sessionId": session_id}

    @app.get("/stats")
    def stats(svc: VisitService = Depends(get_visit_service)):
        return svc.get_visit_counts().model_dump(by_alias=True)

    @app.post("/action")
    def track_action(
        request: Request,
        payload: Any = Body(None),
        svc: ActionService = Depends(get_action_service),
        countries: CountryLookup = Depends(get_countries),
    ):
        if not isinstance(payload, dict):
            return JSONResponse(status_code=400, content={"error": MISSING_ACTION_FIELDS})
        try:
            action = ActionIn.model_validate(payload)
        except ValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
            logger.info("Rejected action payload, invalid fields: %s", ", ".join(fields))
            return JSONResponse(
                status_code=400, content={"error": MISSING_ACTION_FIELDS, "fields": fields}
            )

        # Caller-supplied fields take precedence over header-derived ones.
        data: Dict[str, Any] = describe_request(request.headers, _peer(request), countries)
        referer = request.headers.get("referer")
        if referer:
            data["url"] = referer
        data.update(action.to_dict())
        svc.record_action(data)

        body: Dict[str, Any] = {"success": True, "message": "Action tracked successfully"}
        if action.session_id:
            body["sessionId"] = action.session_id
        return body

    @app.get("/action/stats")
    def action_stats(svc: ActionService = Depends(get_action_service)):
        return svc.get_action_stats().model_dump(by_alias=True)

    @app.get("/actions")
    def list_actions(
        type: Optional[str] = None,
        name: Optional[str] = None,
        start_date: Optional[str] = Query(None, alias="startDate"),
        end_date: Optional[str] = Query(None, alias="endDate"),
        limit: Optional[int] = Query(None, ge=1),
        svc: ActionService = Depends(get_action_service),
    ):
        # Filters override one another in this order; the last one given wins.
        actions = svc.get_all_actions()
        if type:
            actions = svc.get_actions_by_type(type)
        if name:
            actions = svc.get_actions_by_name(name)
        if start_date and end_date:
            try:
                actions = svc.get_actions_by_date_range(start_date, end_date)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=f"Invalid date filter: {e}")

        if limit is not None:
            actions = actions[: min(limit, app.state.settings.max_actions_limit)]
        return [a.to_dict() for a in actions]

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "Bare Count collector is running"


app = create_app()
