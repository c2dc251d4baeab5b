"""Flask API server for auto-apply status, checkout and content."""

import logging
from typing import Type, TypeVar

from flask import Flask, request, jsonify, send_from_directory
from flask_cors import CORS
from pydantic import BaseModel, ValidationError as PydanticValidationError

from config.settings import ADMIN_USER_IDS, FLASK_PORT, FLASK_DEBUG, LOG_LEVEL, STORAGE_DIR
from resumeboost.db.base import create_schema
from resumeboost.schemas import (
    BlogPostCreate,
    BlogPostFilters,
    BlogPostUpdate,
    OrderRequest,
    PreferencesPayload,
    TextGenerationRequest,
    WebinarUpdateChange,
    WebinarUpdateCreate,
    error_details,
)
from resumeboost.services.application_status_service import application_status_service
from resumeboost.services.auth_service import auth_service
from resumeboost.services.blog_service import DEFAULT_PAGE_SIZE, blog_service
from resumeboost.services.browser_service import ExternalBrowserService
from resumeboost.services.errors import (
    NotFound,
    PermissionDenied,
    ServiceError,
    UpstreamError,
    ValidationError,
)
from resumeboost.services.order_service import order_service
from resumeboost.services.preferences_service import preferences_service
from resumeboost.services.webinar_service import webinar_service

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create Flask app
app = Flask(__name__)
CORS(app)  # Enable CORS for the web client

ModelT = TypeVar("ModelT", bound=BaseModel)

# Lazily created clients
llm_service = None
browser_service = None


def get_llm_service():
    """Get or create the LLM service instance."""
    global llm_service
    if llm_service is None:
        from resumeboost.services.llm_service import LLMService

        try:
            llm_service = LLMService()
        except ValueError as error:
            raise UpstreamError(str(error)) from error
    return llm_service


def get_browser_service() -> ExternalBrowserService:
    global browser_service
    if browser_service is None:
        browser_service = ExternalBrowserService()
        if browser_service.is_using_mock_mode():
            logger.warning("EXTERNAL_BROWSER_SERVICE_URL not set; browser service runs in mock mode")
    return browser_service


def _current_user_id() -> str:
    return auth_service.authenticate(request.headers.get("Authorization"))


def _require_admin() -> str:
    user_id = _current_user_id()
    if user_id not in ADMIN_USER_IDS:
        logger.warning(f"User {user_id} attempted an admin operation on {request.path}")
        raise PermissionDenied("Admin access required")
    return user_id


def _parse(model: Type[ModelT], data) -> ModelT:
    """Validate a JSON body (or query args) against ``model``."""
    if data is None:
        raise ValidationError("No JSON data provided")
    try:
        return model.model_validate(data)
    except PydanticValidationError as error:
        raise ValidationError("Invalid request body", details={"errors": error_details(error)}) from error


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as error:
        raise ValidationError(f"{name} must be an integer") from error


@app.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint.

    Returns:
        JSON response with status
    """
    return jsonify({
        "status": "healthy",
        "service": "resumeboost"
    }), 200


# Auto-apply status

@app.route('/status/<application_id>', methods=['GET'])
@app.route('/auto-apply-status/<application_id>', methods=['GET'])
def get_auto_apply_status(application_id: str):
    """Progress of an auto-apply run, projected from its log row and elapsed time."""
    return jsonify(application_status_service.get_status(application_id)), 200


@app.route('/auto-apply/analyze-form', methods=['POST'])
def analyze_form():
    _current_user_id()
    data = request.get_json(silent=True) or {}
    application_url = data.get('url')
    if not application_url:
        raise ValidationError("url is required")
    return jsonify(get_browser_service().analyze_application_form(application_url)), 200


@app.route('/auto-apply', methods=['POST'])
def submit_auto_apply():
    user_id = _current_user_id()
    data = request.get_json(silent=True)
    if not data:
        raise ValidationError("No JSON data provided")
    payload = dict(data, userId=user_id)
    return jsonify(get_browser_service().submit_auto_apply(payload)), 200


@app.route('/auto-apply/<application_id>/cancel', methods=['POST'])
def cancel_auto_apply(application_id: str):
    _current_user_id()
    cancelled = get_browser_service().cancel_auto_apply(application_id)
    return jsonify({"success": cancelled}), 200


@app.route('/auto-apply/health', methods=['GET'])
def browser_service_health():
    service = get_browser_service()
    return jsonify({
        "connected": service.test_connection(),
        "mockMode": service.is_using_mock_mode(),
    }), 200


# Checkout

@app.route('/order', methods=['POST'])
@app.route('/create-order', methods=['POST'])
def create_order():
    """Reconcile a checkout request and open a gateway order.

    Request JSON:
        {
            "planId": "starter_plan",
            "couponCode": "first500",
            "walletDeduction": 0,
            "addOnsTotal": 0,
            "amount": 1280,
            "selectedAddOns": {},
            "metadata": {"type": "subscription"}
        }

    Returns:
        JSON order handle: orderId, amount, currency, transactionId, keyId
    """
    user_id = _current_user_id()
    order_request = _parse(OrderRequest, request.get_json(silent=True))
    handle = order_service.create_order(order_request, user_id)
    return jsonify(handle.to_dict()), 200


# Blog

@app.route('/blog/posts', methods=['GET'])
def list_blog_posts():
    filters = _parse(BlogPostFilters, {
        "search": request.args.get('search') or None,
        "category_id": request.args.get('category_id') or request.args.get('categoryId') or None,
        "tag_id": request.args.get('tag_id') or request.args.get('tagId') or None,
    })
    page = blog_service.fetch_published_posts(
        page=_int_arg('page', 1),
        page_size=_int_arg('pageSize', DEFAULT_PAGE_SIZE),
        filters=filters,
    )
    return jsonify(page.to_dict()), 200


@app.route('/blog/posts/<slug>', methods=['GET'])
def get_blog_post(slug: str):
    post = blog_service.fetch_post_by_slug(slug)
    if post is None:
        raise NotFound("Blog post not found")
    return jsonify(post.to_dict()), 200


@app.route('/blog/posts/<post_id>/related', methods=['GET'])
def get_related_posts(post_id: str):
    posts = blog_service.fetch_related_posts(post_id, limit=_int_arg('limit', 4))
    return jsonify({"posts": [post.to_dict() for post in posts]}), 200


@app.route('/blog/posts', methods=['POST'])
def create_blog_post():
    user_id = _require_admin()
    data = _parse(BlogPostCreate, request.get_json(silent=True))
    post = blog_service.create_post(data, author_id=user_id)
    return jsonify(post.to_dict()), 201


@app.route('/blog/posts/<post_id>', methods=['PUT'])
def update_blog_post(post_id: str):
    _require_admin()
    data = _parse(BlogPostUpdate, request.get_json(silent=True))
    return jsonify(blog_service.update_post(post_id, data).to_dict()), 200


@app.route('/blog/posts/<post_id>', methods=['DELETE'])
def delete_blog_post(post_id: str):
    _require_admin()
    blog_service.delete_post(post_id)
    return jsonify({"status": "success"}), 200


@app.route('/blog/categories', methods=['GET'])
def list_blog_categories():
    categories = blog_service.fetch_all_categories()
    return jsonify({"categories": [category.to_dict() for category in categories]}), 200


@app.route('/blog/categories/<slug>', methods=['GET'])
def get_blog_category(slug: str):
    category = blog_service.fetch_category_by_slug(slug)
    if category is None:
        raise NotFound("Category not found")
    return jsonify(category.to_dict()), 200


@app.route('/blog/tags', methods=['GET'])
def list_blog_tags():
    tags = blog_service.fetch_all_tags()
    return jsonify({"tags": [tag.to_dict() for tag in tags]}), 200


@app.route('/blog/tags/<slug>', methods=['GET'])
def get_blog_tag(slug: str):
    tag = blog_service.fetch_tag_by_slug(slug)
    if tag is None:
        raise NotFound("Tag not found")
    return jsonify(tag.to_dict()), 200


# Job preferences

@app.route('/preferences', methods=['GET'])
def get_preferences():
    user_id = _current_user_id()
    preferences = preferences_service.get_preferences(user_id)
    return jsonify({
        "preferences": preferences.to_dict() if preferences else None,
        "onboardingCompleted": bool(preferences and preferences.onboarding_completed),
    }), 200


@app.route('/preferences', methods=['PUT'])
def save_preferences():
    user_id = _current_user_id()
    payload = _parse(PreferencesPayload, request.get_json(silent=True))
    return jsonify(preferences_service.save_preferences(user_id, payload).to_dict()), 200


@app.route('/preferences', methods=['DELETE'])
def delete_preferences():
    user_id = _current_user_id()
    deleted = preferences_service.delete_preferences(user_id)
    return jsonify({"deleted": deleted}), 200


@app.route('/preferences/<field>', methods=['PATCH'])
def update_preference_field(field: str):
    user_id = _current_user_id()
    body = request.get_json(silent=True)
    if not isinstance(body, dict) or 'value' not in body:
        raise ValidationError("value is required")
    preferences = preferences_service.update_preference_field(user_id, field, body['value'])
    return jsonify(preferences.to_dict()), 200


@app.route('/preferences/onboarding', methods=['POST'])
def complete_onboarding():
    user_id = _current_user_id()
    return jsonify(preferences_service.complete_onboarding(user_id).to_dict()), 200


@app.route('/preferences/resume', methods=['POST'])
def upload_resume():
    """Upload a resume file (multipart field ``file``) and return its public URL."""
    user_id = _current_user_id()
    upload = request.files.get('file')
    if upload is None:
        raise ValidationError("file is required")
    url = preferences_service.upload_resume(user_id, upload.filename, upload.read())
    return jsonify({"url": url}), 201


@app.route('/preferences/resume', methods=['DELETE'])
def delete_resume():
    user_id = _current_user_id()
    body = request.get_json(silent=True) or {}
    resume_url = body.get('url')
    if not resume_url:
        raise ValidationError("url is required")
    return jsonify({"deleted": preferences_service.delete_resume(user_id, resume_url)}), 200


@app.route('/storage/<bucket>/<path:path>', methods=['GET'])
def serve_storage(bucket: str, path: str):
    return send_from_directory(STORAGE_DIR / bucket, path)


# Webinar updates

@app.route('/webinars/<webinar_id>/updates', methods=['GET'])
def list_webinar_updates(webinar_id: str):
    user_id = None
    if request.headers.get("Authorization"):
        user_id = _current_user_id()
    updates = webinar_service.get_webinar_updates(webinar_id, user_id)
    return jsonify({"updates": [update.to_dict() for update in updates]}), 200


@app.route('/webinars/<webinar_id>/updates/unread-count', methods=['GET'])
def unread_webinar_updates(webinar_id: str):
    user_id = _current_user_id()
    return jsonify({"count": webinar_service.get_unread_updates_count(user_id, webinar_id)}), 200


@app.route('/webinars/<webinar_id>/updates/viewed', methods=['POST'])
def mark_all_webinar_updates_viewed(webinar_id: str):
    user_id = _current_user_id()
    marked = webinar_service.mark_all_updates_as_viewed(webinar_id, user_id)
    return jsonify({"marked": marked}), 200


@app.route('/webinar-updates/<update_id>/view', methods=['POST'])
def mark_webinar_update_viewed(update_id: str):
    user_id = _current_user_id()
    webinar_service.mark_update_as_viewed(update_id, user_id)
    return jsonify({"status": "success"}), 200


@app.route('/webinars/<webinar_id>/updates/all', methods=['GET'])
def list_all_webinar_updates(webinar_id: str):
    _require_admin()
    updates = webinar_service.get_all_webinar_updates(webinar_id)
    return jsonify({"updates": [update.to_dict() for update in updates]}), 200


@app.route('/webinar-updates', methods=['POST'])
def create_webinar_update():
    user_id = _require_admin()
    data = _parse(WebinarUpdateCreate, request.get_json(silent=True))
    return jsonify(webinar_service.create_webinar_update(data, created_by=user_id).to_dict()), 201


@app.route('/webinar-updates/<update_id>', methods=['PUT'])
def update_webinar_update(update_id: str):
    _require_admin()
    data = _parse(WebinarUpdateChange, request.get_json(silent=True))
    return jsonify(webinar_service.update_webinar_update(update_id, data).to_dict()), 200


@app.route('/webinar-updates/<update_id>', methods=['DELETE'])
def delete_webinar_update(update_id: str):
    _require_admin()
    webinar_service.delete_webinar_update(update_id)
    return jsonify({"status": "success"}), 200


# Text generation

@app.route('/generate-text', methods=['POST'])
def generate_text():
    """Single-prompt completion.

    Request JSON:
        {
            "prompt": "Rewrite this bullet point..."
        }

    Returns:
        JSON response with the generated text
    """
    _current_user_id()
    data = _parse(TextGenerationRequest, request.get_json(silent=True))
    text = get_llm_service().generate_text(data.prompt)
    return jsonify({"status": "success", "text": text}), 200


@app.errorhandler(ServiceError)
def handle_service_error(error: ServiceError):
    """Render service errors as structured JSON."""
    if error.http_status >= 500:
        logger.error(f"{error.kind} on {request.path}: {error.message}")
    else:
        logger.info(f"{error.kind} on {request.path}: {error.message}")
    return jsonify(error.to_dict()), error.http_status


@app.errorhandler(404)
def not_found(error):
    """Handle 404 errors."""
    return jsonify({
        "error": "Endpoint not found",
        "status": "failed"
    }), 404


@app.errorhandler(500)
def internal_error(error):
    """Handle 500 errors."""
    original = getattr(error, "original_exception", None) or error
    logger.error(f"Internal server error: {original}", exc_info=original)
    return jsonify({
        "error": "Internal server error",
        "status": "failed"
    }), 500


def run_server():
    """Run the Flask server."""
    # Check critical configuration
    from config.settings import (
        AUTH_JWT_SECRET,
        DATABASE_URL,
        EXTERNAL_BROWSER_SERVICE_URL,
        OPENROUTER_API_KEY,
        RAZORPAY_KEY_ID,
        RAZORPAY_KEY_SECRET,
    )

    logger.info("=" * 60)
    logger.info("Configuration Check:")
    logger.info(f"Auth JWT Secret: {'✓ Configured' if AUTH_JWT_SECRET else '✗ MISSING'}")
    logger.info(f"Razorpay Keys: {'✓ Configured' if RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET else '✗ MISSING'}")
    logger.info(f"OpenRouter API Key: {'✓ Configured' if OPENROUTER_API_KEY else '✗ MISSING'}")
    logger.info(f"External Browser Service: {EXTERNAL_BROWSER_SERVICE_URL or 'mock mode'}")
    logger.info(f"Admin users: {len(ADMIN_USER_IDS)}")
    logger.info("=" * 60)

    if not AUTH_JWT_SECRET:
        logger.warning("AUTH_JWT_SECRET is not configured! Every authenticated request will be rejected.")

    create_schema(DATABASE_URL)

    # Log registered routes for debugging
    logger.info("=" * 60)
    logger.info("Registered Routes:")
    for rule in app.url_map.iter_rules():
        methods = ','.join(sorted(rule.methods - {'HEAD', 'OPTIONS'}))
        logger.info(f"  {rule.rule:50s} [{methods}]")
    logger.info("=" * 60)

    logger.info(f"Starting Flask server on port {FLASK_PORT}")
    app.run(
        host='0.0.0.0',
        port=FLASK_PORT,
        debug=FLASK_DEBUG,
        threaded=True
    )


if __name__ == '__main__':
    run_server()
