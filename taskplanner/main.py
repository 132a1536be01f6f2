from fastapi import FastAPI
from taskplanner.config import LOG_LEVEL, LOG_FILE
from taskplanner.database import engine
from taskplanner.logger import setup_logging
from taskplanner.models import Base
from taskplanner.routes import users, tasks, events, schedule

setup_logging(LOG_LEVEL, LOG_FILE)

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title="Task Planner API",
    description="Personal task and calendar manager with automatic scheduling suggestions",
    version="1.0.0"
)

# Include routers
app.include_router(users.router, prefix="/users", tags=["users"])
app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
app.include_router(events.router, prefix="/events", tags=["events"])
app.include_router(schedule.router, prefix="/schedule", tags=["schedule"])

@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": "Welcome to Task Planner API",
        "version": "1.0.0",
        "endpoints": {
            "users": "POST /users/register, GET /users/me",
            "tasks": "POST /tasks/create, GET/PUT/DELETE /tasks/{id}, POST /tasks/{id}/unschedule",
            "events": "POST /events/create, PUT /events/update/{id} - Save an event and reschedule displaced tasks",
            "suggestions": "GET /schedule/suggestions - Proposed slots for unscheduled tasks",
            "apply": "POST /schedule/apply - Commit a suggestion",
            "reschedule": "POST /schedule/reschedule/{task_id} - Alternative slot for one task",
        },
        "authentication": "X-User-Id header",
        "swagger_ui": "/docs - Interactive API documentation",
    }

@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

# This allows running the app directly with: python -m taskplanner.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("taskplanner.main:app", host="0.0.0.0", port=8000, reload=True)
