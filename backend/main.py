import os
import sys
from datetime import datetime, timezone

# Ensure this directory is in the path for uvicorn and other runners
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from fastapi import FastAPI, Depends
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware

from auth import AuthUser, get_optional_user
from config import APP_ENV, FRONTEND_URL, UPLOAD_DIR
from database import init_db
from errors import register_error_handlers
from responses import success
from routes.auth_routes import router as auth_router
from routes.user_routes import router as user_router
from routes.category_routes import router as category_router
from routes.expense_routes import router as expense_router
from routes.income_routes import router as income_router
from routes.budget_routes import router as budget_router
from routes.analytics_routes import router as analytics_router
from routes.export_routes import router as export_router
from routes.admin_routes import router as admin_router

# Create tables and seed default categories
init_db()

app = FastAPI(title="FinTrack API")
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.get("/api/v1/health")
def health(current_user: AuthUser | None = Depends(get_optional_user)):
    return success({
        "status": "ok",
        "environment": APP_ENV,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "authenticated": current_user is not None,
    }, "FinTrack API is running")


for router in (
    auth_router,
    user_router,
    category_router,
    expense_router,
    income_router,
    budget_router,
    analytics_router,
    export_router,
    admin_router,
):
    app.include_router(router)

# Receipts and profile pictures
os.makedirs(UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=APP_ENV == "development")
