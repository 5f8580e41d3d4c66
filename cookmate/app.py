from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import Depends, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events, record_event
from .auth import cookbook
from .auth.dependencies import require_admin, require_author, require_user
from .auth.models import LoginRequest, ProfileUpdate, RegisterRequest, RoleUpdate, StatusUpdate
from .auth.users import (
    authenticate,
    delete_user,
    get_user,
    list_users,
    register,
    set_active,
    set_role,
    update_profile,
)
from .catalog import store as catalog
from .catalog.models import RateRequest, RecipeCreate, RecipeSummary, RecipeUpdate
from .catalog.seed import seed_catalog
from .config import DEFAULT_APP_CONFIG
from .errors import AppError, AuthorizationError, InternalError
from .recommendations.engine import (
    match_by_ingredients,
    quick_recipes,
    recommend,
    trending_recipes,
    trending_window_start,
)
from .recommendations.explain import explain_recommendations
from .recommendations.models import (
    IngredientSearchRequest,
    IngredientSearchResponse,
    RecommendationItem,
    RecommendationResponse,
)
from .taxonomy import (
    Category,
    Cuisine,
    DietaryPreference,
    Difficulty,
    Interest,
    ReferralSource,
    Role,
    SpiceLevel,
    Timeframe,
    WaitlistStatus,
)
from .waitlist import queue as waitlist
from .waitlist.models import JoinRequest, WaitlistUpdate

logger = logging.getLogger(__name__)
logging.getLogger("cookmate").setLevel(DEFAULT_APP_CONFIG.log_level.upper())

app = FastAPI(title="Cookmate API", version="1.0.0")
app.add_middleware(SessionMiddleware, secret_key=DEFAULT_APP_CONFIG.session_secret)

if DEFAULT_APP_CONFIG.seed_catalog:
    seed_catalog(DEFAULT_APP_CONFIG.seed_path)


def success(data: Any = None, message: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"status": "success"}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def _error(status_code: int, code: str, message: str, **extra: Any) -> JSONResponse:
    body = {"status": "error", "code": code, "message": message, **extra}
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


# ── Error handlers ───────────────────────────────────────────────────────


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error(exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(p) for p in err["loc"][1:]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return _error(422, "validation_error", "Invalid request", errors=errors)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, "http_error", str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, InternalError.code, InternalError.default_message)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict:
    return success(message="Cookmate API is running")


@app.get("/metadata")
def metadata() -> dict:
    return success({
        "categories": [c.value for c in Category],
        "cuisines": [c.value for c in Cuisine],
        "difficulties": [d.value for d in Difficulty],
        "spice_levels": [s.value for s in SpiceLevel],
        "dietary_preferences": [d.value for d in DietaryPreference],
        "interests": [i.value for i in Interest],
        "referral_sources": [r.value for r in ReferralSource],
    })


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/register", status_code=201)
def auth_register(body: RegisterRequest, request: Request) -> dict:
    user = register(body)
    identity = user.session_identity()
    request.session["user"] = identity
    return success({"user": identity}, "Account created")


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.email, body.password)
    if not user:
        return _error(401, "invalid_credentials", "Invalid credentials")
    request.session["user"] = user
    return success({"user": user})


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return success(message="Logged out")


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return success({"user": get_user(user["id"])})


# ── Waitlist endpoints ───────────────────────────────────────────────────


@app.post("/waitlist", status_code=201)
def join_waitlist(body: JoinRequest, request: Request) -> dict:
    result = waitlist.join(
        body,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    record_event("waitlist_join", {
        "referral_source": body.referral_source.value,
        "cooking_experience": body.cooking_experience.value,
    })
    return success({"waitlist_entry": result}, "Successfully joined the waitlist!")


@app.get("/waitlist/stats")
def waitlist_stats() -> dict:
    return success(waitlist.get_stats())


@app.get("/waitlist")
def waitlist_entries(
    status: WaitlistStatus | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    sort: waitlist.WaitlistSort = "position",
    order: waitlist.SortOrder = "asc",
    user: dict = Depends(require_admin),
) -> dict:
    return success(waitlist.list_entries(status, page, limit, sort, order))


@app.get("/waitlist/next")
def waitlist_next(
    limit: int = Query(default=10, ge=1, le=50),
    user: dict = Depends(require_admin),
) -> dict:
    return success({"next_users": waitlist.next_in_line(limit)})


@app.get("/waitlist/{entry_id}")
def waitlist_entry(entry_id: str, user: dict = Depends(require_admin)) -> dict:
    return success({"waitlist_entry": waitlist.get_entry(entry_id)})


@app.post("/waitlist/{entry_id}/invite")
def waitlist_invite(entry_id: str, user: dict = Depends(require_admin)) -> dict:
    entry = waitlist.invite(entry_id)
    return success({"waitlist_entry": entry}, "User invited successfully")


@app.post("/waitlist/{entry_id}/register")
def waitlist_register(entry_id: str, user: dict = Depends(require_admin)) -> dict:
    entry = waitlist.mark_registered(entry_id)
    return success({"waitlist_entry": entry}, "User marked as registered")


@app.put("/waitlist/{entry_id}")
def waitlist_update(
    entry_id: str,
    body: WaitlistUpdate,
    user: dict = Depends(require_admin),
) -> dict:
    entry = waitlist.update_entry(entry_id, body)
    return success({"waitlist_entry": entry}, "Waitlist entry updated successfully")


@app.delete("/waitlist/{entry_id}")
def waitlist_delete(entry_id: str, user: dict = Depends(require_admin)) -> dict:
    waitlist.delete_entry(entry_id)
    return success(message="Waitlist entry deleted successfully")


# ── Recipe endpoints ─────────────────────────────────────────────────────


@app.get("/recipes")
def recipes(
    category: Category | None = None,
    cuisine: Cuisine | None = None,
    difficulty: Difficulty | None = None,
    is_vegetarian: bool | None = None,
    spice_level: SpiceLevel | None = None,
    search: str | None = None,
    sort: catalog.RecipeSort = "popularity",
    order: catalog.SortOrder = "desc",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=catalog.DEFAULT_LIST_LIMIT, ge=1, le=catalog.MAX_LIST_LIMIT),
) -> dict:
    filters = catalog.RecipeFilters(
        category=category,
        cuisine=cuisine,
        difficulty=difficulty,
        is_vegetarian=is_vegetarian,
        spice_level=spice_level,
    )
    result = catalog.list_recipes(
        filters, search=search, sort=sort, order=order, page=page, limit=limit,
    )
    return success(result)


@app.get("/recipes/featured")
def featured() -> dict:
    return success({"recipes": catalog.featured_recipes()})


@app.get("/recipes/recommendations")
def recommendations(
    limit: int = Query(default=10, ge=1, le=20),
    user: dict = Depends(require_user),
) -> dict:
    start_time = time.time()
    account = get_user(user["id"])
    top, total = recommend(account, catalog.all_recipes(), limit)

    preferences = {
        "cooking_experience": (
            account.profile.cooking_experience.value
            if account.profile.cooking_experience else None
        ),
        "dietary_preferences": [d.value for d in account.profile.dietary_preferences],
        "favorite_cuisines": [c.value for c in account.profile.favorite_cuisines],
        "spice_level": (
            account.preferences.spice_level.value if account.preferences.spice_level else None
        ),
    }
    reasons = explain_recommendations(
        preferences,
        [
            {
                "id": r.id,
                "name": r.name,
                "cuisine": r.cuisine.value,
                "difficulty": r.difficulty.value,
                "total_time": r.total_time,
                "spice_level": r.spice_level.value,
            }
            for r in top
        ],
    )

    response = RecommendationResponse(
        recommendations=[RecommendationItem(recipe=r, reason=reasons.get(r.id)) for r in top],
        total_candidates=total,
    )
    record_event("recommendations", {
        "user_id": account.id,
        "total_candidates": total,
        "results_returned": len(top),
        "response_time_ms": round((time.time() - start_time) * 1000, 1),
    })
    return success(response)


@app.post("/recipes/by-ingredients")
def recipes_by_ingredients(body: IngredientSearchRequest) -> dict:
    start_time = time.time()
    scored = match_by_ingredients(body.ingredients, catalog.all_recipes(), body.limit)
    search_terms = [i.strip().lower() for i in body.ingredients]
    record_event("ingredient_search", {
        "ingredients": search_terms,
        "results_returned": len(scored),
        "response_time_ms": round((time.time() - start_time) * 1000, 1),
    })
    return success(IngredientSearchResponse(recipes=scored, search_ingredients=search_terms))


@app.get("/recipes/quick")
def recipes_quick(
    limit: int = Query(default=10, ge=1, le=20),
    max_time: int = Query(default=30, ge=5, le=60),
) -> dict:
    return success({"quick_recipes": quick_recipes(catalog.all_recipes(), max_time, limit)})


@app.get("/recipes/trending")
def recipes_trending(
    limit: int = Query(default=10, ge=1, le=20),
    timeframe: Timeframe = Timeframe.week,
) -> dict:
    return success({
        "trending_recipes": trending_recipes(catalog.all_recipes(), timeframe, limit),
        "timeframe": timeframe.value,
        "start_date": trending_window_start(timeframe),
    })


@app.get("/recipes/favorites")
def recipes_favorites(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=12, ge=1, le=50),
    user: dict = Depends(require_user),
) -> dict:
    return success(cookbook.favorite_recipes(user["id"], page, limit))


@app.get("/recipes/{recipe_id}")
def recipe_detail(recipe_id: str) -> dict:
    recipe = catalog.view_recipe(recipe_id)
    record_event("recipe_view", {"recipe_id": recipe.id, "recipe_name": recipe.name})
    return success({"recipe": recipe})


@app.post("/recipes", status_code=201)
def recipe_create(body: RecipeCreate, user: dict = Depends(require_author)) -> dict:
    return success({"recipe": catalog.create_recipe(body, created_by=user["id"])})


@app.put("/recipes/{recipe_id}")
def recipe_update(
    recipe_id: str,
    body: RecipeUpdate,
    user: dict = Depends(require_user),
) -> dict:
    return success({"recipe": catalog.update_recipe(recipe_id, body, user)})


@app.delete("/recipes/{recipe_id}")
def recipe_delete(recipe_id: str, user: dict = Depends(require_user)) -> dict:
    catalog.delete_recipe(recipe_id, user)
    return success(message="Recipe deleted successfully")


@app.post("/recipes/{recipe_id}/rate")
def recipe_rate(
    recipe_id: str,
    body: RateRequest,
    user: dict = Depends(require_user),
) -> dict:
    recipe = catalog.rate_recipe(recipe_id, body.rating)
    return success({"recipe": RecipeSummary(id=recipe.id, name=recipe.name, rating=recipe.rating)})


@app.post("/recipes/{recipe_id}/cook")
def recipe_cook(recipe_id: str, user: dict = Depends(require_user)) -> dict:
    account = cookbook.record_cooked(user["id"], recipe_id)
    recipe = catalog.get_recipe(recipe_id)
    return success(
        {
            "recipe": RecipeSummary(id=recipe.id, name=recipe.name),
            "user_stats": {
                "recipes_cooked": account.stats.recipes_cooked,
                "cooking_streak": account.stats.cooking_streak,
            },
        },
        "Recipe marked as cooked! Great job!",
    )


@app.post("/recipes/{recipe_id}/favorite")
def recipe_favorite(recipe_id: str, user: dict = Depends(require_user)) -> dict:
    cookbook.add_favorite(user["id"], recipe_id)
    recipe = catalog.get_recipe(recipe_id)
    return success({"recipe": RecipeSummary(id=recipe.id, name=recipe.name)}, "Recipe added to favorites!")


@app.delete("/recipes/{recipe_id}/favorite")
def recipe_unfavorite(recipe_id: str, user: dict = Depends(require_user)) -> dict:
    cookbook.remove_favorite(user["id"], recipe_id)
    return success({"recipe_id": recipe_id}, "Recipe removed from favorites")


@app.post("/recipes/{recipe_id}/save")
def recipe_save(recipe_id: str, user: dict = Depends(require_user)) -> dict:
    cookbook.save_recipe(user["id"], recipe_id)
    recipe = catalog.get_recipe(recipe_id)
    return success({"recipe": RecipeSummary(id=recipe.id, name=recipe.name)}, "Recipe saved")


@app.delete("/recipes/{recipe_id}/save")
def recipe_unsave(recipe_id: str, user: dict = Depends(require_user)) -> dict:
    cookbook.unsave_recipe(user["id"], recipe_id)
    return success({"recipe_id": recipe_id}, "Recipe removed from saved")


# ── User endpoints ───────────────────────────────────────────────────────


@app.get("/users")
def users(
    role: Role | None = None,
    is_active: bool | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=50),
    user: dict = Depends(require_admin),
) -> dict:
    return success(list_users(role, is_active, page, limit))


@app.get("/users/top-cooks")
def users_top_cooks(limit: int = Query(default=10, ge=1, le=20)) -> dict:
    return success({"top_cooks": cookbook.top_cooks(limit)})


@app.put("/users/me/profile")
def users_update_profile(body: ProfileUpdate, user: dict = Depends(require_user)) -> dict:
    return success({"user": update_profile(user["id"], body)}, "Profile updated")


@app.get("/users/{user_id}")
def user_detail(user_id: str, user: dict = Depends(require_user)) -> dict:
    if user["id"] != user_id and user.get("role") != Role.admin.value:
        raise AuthorizationError("Not authorized to view this profile")
    return success({"user": get_user(user_id)})


@app.put("/users/{user_id}/role")
def user_role(user_id: str, body: RoleUpdate, user: dict = Depends(require_admin)) -> dict:
    return success({"user": set_role(user_id, body.role)}, "User role updated successfully")


@app.put("/users/{user_id}/status")
def user_status(user_id: str, body: StatusUpdate, user: dict = Depends(require_admin)) -> dict:
    account = set_active(user_id, body.is_active)
    state = "activated" if body.is_active else "deactivated"
    return success({"user": account}, f"User {state} successfully")


@app.delete("/users/{user_id}")
def user_delete(user_id: str, user: dict = Depends(require_admin)) -> dict:
    delete_user(user_id, user)
    return success(message="User deleted successfully")


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    return success(compute_analytics(get_events()))
