from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi import status
from pydantic import BaseModel
from typing import Optional
from manager import EventManager
from models import ErrorCode, Role, User
from config import Settings, load_settings
import logging
from contextlib import asynccontextmanager

settings = load_settings()

# Logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# -------------------------------
# Schemas
# -------------------------------
class UserRegister(BaseModel):
    email: str
    password: str
    name: str
    role: Role

class UserLogin(BaseModel):
    email: str
    password: Optional[str] = None
    role: Role

class QuickLogin(BaseModel):
    email: str
    role: Role

class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

class EventCreate(BaseModel):
    title: str
    description: str
    venue: str
    category: str
    district: str
    date: str
    time: str
    capacity: int

    class Config:
        json_schema_extra = {
            "example": {
                "title": "TechFest 2024",
                "description": "Hackathons, robotics demos and talks",
                "venue": "Main Auditorium",
                "category": "Technical",
                "district": "Thrissur",
                "date": "2024-12-12",
                "time": "09:30",
                "capacity": 500
            }
        }

class EventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    venue: Optional[str] = None
    category: Optional[str] = None
    district: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    capacity: Optional[int] = None

# -------------------------------
# Dependencies
# -------------------------------
# Handlers and dependencies are async so core calls run one at a time on the event loop.
async def get_manager(request: Request) -> EventManager:
    return request.app.state.manager

async def get_current_user(manager: EventManager = Depends(get_manager)) -> User:
    """Return the session user or fail with 401."""
    user = manager.users.get_current_user()
    if user is None:
        raise HTTPException(status_code=401, detail="Please login first")
    return user

async def require_organizer(user: User = Depends(get_current_user)) -> User:
    if user.role != "organizer":
        raise HTTPException(status_code=403, detail="Only organizers can manage events")
    return user

ERROR_STATUS = {
    ErrorCode.DUPLICATE_EMAIL: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_PASSWORD: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_AUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
}

def _fail(error: ErrorCode, message: str):
    raise HTTPException(status_code=ERROR_STATUS.get(error, 400), detail=message)

def _events(events):
    return [e.to_dict() for e in events]

# -------------------------------
# App
# -------------------------------
def create_app(manager: Optional[EventManager] = None, app_settings: Optional[Settings] = None) -> FastAPI:
    """Build the API around an EventManager. Without one, the lifespan opens the configured store."""
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.manager is None
        if owned:
            logger.info(f"Opening event store {app_settings.db_name}")
            app.state.manager = EventManager.from_settings(app_settings)
        yield
        if owned:
            logger.info("Closing event store")
            app.state.manager.close()

    app = FastAPI(lifespan=lifespan)
    app.state.manager = manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------
    # Auth Routes
    # -------------------------------
    @app.post("/register", response_model=dict, status_code=status.HTTP_201_CREATED, summary="Register a new user")
    async def register(user: UserRegister, manager: EventManager = Depends(get_manager)):
        """Register a new user. Emails are unique across roles."""
        result = manager.users.register(user.email, user.password, user.name, user.role)
        if not result.success:
            _fail(result.error, result.message)
        return {"message": result.message, "data": result.user.to_public()}

    @app.post("/login", response_model=dict, summary="Login with email, password and role")
    async def login(user: UserLogin, manager: EventManager = Depends(get_manager)):
        result = manager.users.login(user.email, user.password, user.role)
        if not result.success:
            _fail(result.error, result.message)
        return {"message": result.message, "data": result.user.to_public()}

    @app.post("/quick-login", response_model=dict, summary="Login by email, creating the account if needed")
    async def quick_login(user: QuickLogin, manager: EventManager = Depends(get_manager)):
        result = manager.users.quick_login(user.email, user.role)
        return {"message": result.message, "data": result.user.to_public()}

    @app.post("/logout", response_model=dict, summary="End the current session")
    async def logout(manager: EventManager = Depends(get_manager)):
        manager.users.logout()
        return {"message": "Logged out", "data": {}}

    @app.get("/me", response_model=dict, summary="Current session user")
    async def me(current_user: User = Depends(get_current_user)):
        return {"message": "Current user", "data": current_user.to_public()}

    @app.put("/users/{user_id}", response_model=dict, summary="Update your profile")
    async def update_profile(user_id: int, updates: ProfileUpdate, manager: EventManager = Depends(get_manager),
                             current_user: User = Depends(get_current_user)):
        if current_user.id != user_id:
            raise HTTPException(status_code=403, detail="Access denied: you can only update your own profile")
        if not manager.users.update_profile(user_id, updates.model_dump(exclude_none=True)):
            raise HTTPException(status_code=404, detail="User not found")
        logger.info(f"Profile {user_id} updated")
        return {"message": "Profile updated", "data": manager.users.get_user_by_id(user_id).to_public()}

    @app.get("/users/{user_id}/events", response_model=dict, summary="Events a user is registered for")
    async def user_events(user_id: int, manager: EventManager = Depends(get_manager)):
        return {"message": "Registered events retrieved", "data": _events(manager.events.get_user_registered_events(user_id))}

    # -------------------------------
    # Event Routes
    # -------------------------------
    @app.get("/", response_model=dict, summary="API root endpoint")
    async def root():
        """Welcome message for the Event Hub API."""
        return {"message": "Welcome to Event Hub", "data": {}}

    @app.get("/events", response_model=dict, summary="List events, optionally filtered")
    async def list_events(category: Optional[str] = None, district: Optional[str] = None, q: Optional[str] = None,
                          manager: EventManager = Depends(get_manager)):
        catalog = manager.events
        events = catalog.search_events(q) if q else catalog.list_events()
        if category:
            events = [e for e in events if e.category == category]
        if district:
            events = [e for e in events if e.district == district]
        return {"message": "Events retrieved", "data": _events(events)}

    @app.get("/events/upcoming", response_model=dict, summary="Events in the coming week")
    async def upcoming_events(manager: EventManager = Depends(get_manager)):
        return {"message": "Upcoming events retrieved", "data": _events(manager.events.get_upcoming_events())}

    @app.get("/events/popular", response_model=dict, summary="Events with the most attendees")
    async def popular_events(manager: EventManager = Depends(get_manager)):
        return {"message": "Popular events retrieved", "data": _events(manager.events.get_popular_events())}

    @app.get("/events/stats", response_model=dict, summary="Aggregate event statistics")
    async def event_stats(manager: EventManager = Depends(get_manager)):
        return {"message": "Statistics retrieved", "data": manager.events.get_event_statistics().to_dict()}

    @app.post("/events", response_model=dict, status_code=status.HTTP_201_CREATED, summary="Create a new event")
    async def create_event(event: EventCreate, manager: EventManager = Depends(get_manager),
                           current_user: User = Depends(require_organizer)):
        """Create a new event (organizers only)."""
        if event.capacity <= 0:
            raise HTTPException(status_code=400, detail="Capacity must be positive")
        evt = manager.events.create_event(event.model_dump())
        logger.info(f"Event {evt.id} created by {current_user.id}")
        return {"message": "Event created", "data": evt.to_dict()}

    @app.get("/events/{event_id}", response_model=dict, summary="Get an event")
    async def get_event(event_id: int, manager: EventManager = Depends(get_manager)):
        evt = manager.events.get_event_by_id(event_id)
        if not evt:
            raise HTTPException(status_code=404, detail="Event not found")
        return {"message": "Event retrieved", "data": evt.to_dict()}

    @app.put("/events/{event_id}", response_model=dict, summary="Update an event")
    async def update_event(event_id: int, event: EventUpdate, manager: EventManager = Depends(get_manager),
                           current_user: User = Depends(require_organizer)):
        if event.capacity is not None and event.capacity <= 0:
            raise HTTPException(status_code=400, detail="Capacity must be positive")
        evt = manager.events.update_event(event_id, event.model_dump(exclude_none=True))
        if not evt:
            raise HTTPException(status_code=404, detail="Event not found")
        logger.info(f"Event {event_id} updated by {current_user.id}")
        return {"message": f"Event {event_id} updated", "data": evt.to_dict()}

    @app.delete("/events/{event_id}", response_model=dict, summary="Delete an event")
    async def delete_event(event_id: int, manager: EventManager = Depends(get_manager),
                           current_user: User = Depends(require_organizer)):
        if not manager.events.delete_event(event_id):
            raise HTTPException(status_code=404, detail="Event not found")
        logger.info(f"Event {event_id} deleted by {current_user.id}")
        return {"message": f"Event {event_id} deleted", "data": {}}

    @app.post("/events/{event_id}/view", response_model=dict, summary="Mark an event as the one being viewed")
    async def view_event(event_id: int, manager: EventManager = Depends(get_manager)):
        evt = manager.events.get_event_by_id(event_id)
        if not evt:
            raise HTTPException(status_code=404, detail="Event not found")
        manager.view_event(evt.id)
        return {"message": "Event selected", "data": evt.to_dict()}

    @app.post("/events/{event_id}/register", response_model=dict, summary="Register the current user for an event")
    async def register_for_event(event_id: int, manager: EventManager = Depends(get_manager),
                                 current_user: User = Depends(get_current_user)):
        evt = manager.events.get_event_by_id(event_id)
        if not evt:
            raise HTTPException(status_code=404, detail="Event not found")
        manager.view_event(evt.id)
        result = manager.register_current_user()
        if not result.success:
            _fail(result.error, result.message)
        logger.info(f"{current_user.email}: {result.message}")
        return {"message": result.message, "data": result.event.to_dict()}

    # -------------------------------
    # Browse Routes
    # -------------------------------
    @app.post("/districts/{district}/browse", response_model=dict, summary="Login and browse a district")
    async def browse_district(district: str, user: QuickLogin, manager: EventManager = Depends(get_manager)):
        result = manager.browse_district(user.email, user.role, district)
        return {"message": result.message, "data": {"user": result.user.to_public(), "district": district}}

    @app.get("/dashboard", response_model=dict, summary="Events for the selected district")
    async def dashboard(manager: EventManager = Depends(get_manager)):
        return {
            "message": "Dashboard events retrieved",
            "data": {
                "district": manager.selected_district(),
                "districts": manager.events.districts(),
                "categories": manager.events.categories(),
                "events": _events(manager.dashboard_events()),
            },
        }

    return app


app = create_app()
