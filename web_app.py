import os
import re
import json
import logging
import warnings

# Suppress noisy logs
logging.getLogger("LiteLLM").setLevel(logging.CRITICAL)
logging.getLogger("litellm").setLevel(logging.CRITICAL)
warnings.filterwarnings("ignore", category=DeprecationWarning)

from dotenv import load_dotenv
load_dotenv()

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

import stripe

import billing
import config
import db
import forum
import hints
import mailer
import moderation
import quiz_generator
import quiz_store
import security
import subscriptions
from errors import UpstreamError

logger = logging.getLogger(__name__)

GLUE_CORS_HEADERS = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS,POST,PUT",
    "Access-Control-Allow-Headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
        "Content-MD5, Content-Type, Date, X-Api-Version"
    ),
}
EDGE_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

CLIENT_COOKIE = "client_id"
COOKIE_MAX_AGE = 86400 * 30
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

HARMFUL_MESSAGE_ERROR = "Your message contains potentially harmful content and cannot be sent."
DEEPSEEK_ERRORS = {
    401: "DeepSeek API authentication failed: Invalid or expired API key",
    429: "DeepSeek API rate limit exceeded",
    504: "Request timeout - DeepSeek API took too long to respond",
}

# === Helpers ===

def glue_json(data, status_code=200):
    return JSONResponse(data, status_code=status_code, headers=GLUE_CORS_HEADERS)

def edge_json(data, status_code=200):
    return JSONResponse(data, status_code=status_code, headers=EDGE_CORS_HEADERS)

def preflight(headers):
    return Response(status_code=200, headers=headers)

async def read_json(request: Request) -> dict:
    """Request body as a dict; raises ValueError for anything else."""
    body = await request.body()
    if not body:
        return {}
    data = json.loads(body)
    if not isinstance(data, dict):
        raise ValueError("JSON body must be an object")
    return data

def get_bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header.removeprefix("Bearer ").strip() or None

def get_current_user(request: Request):
    return db.get_user_by_token(get_bearer_token(request))

def get_owner(request: Request):
    """Returns (owner, user, new_client_id). new_client_id is set when a cookie must be issued."""
    user = get_current_user(request)
    if user:
        return user["id"], user, None
    client_id = request.cookies.get(CLIENT_COOKIE)
    if client_id:
        return f"anon:{client_id}", None, None
    client_id = os.urandom(8).hex()
    return f"anon:{client_id}", None, client_id

def with_client_cookie(resp, new_client_id):
    if new_client_id:
        resp.set_cookie(CLIENT_COOKIE, new_client_id, max_age=COOKIE_MAX_AGE, httponly=True, samesite="lax")
    return resp

def csrf_failed(request: Request, owner, user):
    """Cookie-identified owners must echo their CSRF token on writes."""
    if user:
        return False
    return not security.verify_csrf_token(owner, request.headers.get(security.CSRF_HEADER))

def display_name(user):
    if not user:
        return "User"
    return user.get("display_name") or user["email"].split("@")[0]

# === Glue endpoints ===

async def api_check_api_keys(request: Request):
    if request.method == "OPTIONS":
        return preflight(GLUE_CORS_HEADERS)
    status = config.api_keys_status()
    if status["missing_required"]:
        return glue_json({
            "success": False,
            "missingKeys": status["missing_required"],
            "optionalMissingKeys": status["missing_optional"],
        }, status_code=400)
    return glue_json({
        "success": True,
        "apiKeysStatus": status["present"],
        "optionalMissingKeys": status["missing_optional"],
    })

async def api_generate_hint(request: Request):
    if request.method == "OPTIONS":
        return preflight(GLUE_CORS_HEADERS)
    if request.method != "POST":
        return glue_json({"error": "Method not allowed"}, status_code=405)
    try:
        data = await read_json(request)
    except ValueError:
        return glue_json({"error": "Invalid JSON body"}, status_code=400)
    question = data.get("question")
    if not isinstance(question, dict):
        return glue_json({"error": "Missing question"}, status_code=400)
    if not config.get_env_var("DEEPSEEK_API_KEY"):
        return glue_json({"error": "API key not configured in environment variables"}, status_code=500)
    try:
        hint = await run_in_threadpool(hints.generate_hint, question, data.get("bloomLevel"))
    except Exception:
        logger.exception("Error generating hint")
        hint = hints.fallback_hint(question)
    return glue_json({"hint": hint})

async def api_send_message(request: Request):
    if request.method == "OPTIONS":
        return preflight(GLUE_CORS_HEADERS)
    if request.method != "POST":
        return glue_json({"error": "Method not allowed"}, status_code=405)
    try:
        data = await read_json(request)
    except ValueError:
        return glue_json({"error": "Invalid JSON body"}, status_code=400)
    fields = {k: str(data.get(k) or "").strip() for k in ("name", "email", "subject", "message")}
    if not all(fields.values()):
        return glue_json({"error": "Name, email, subject and message are required"}, status_code=400)
    if not EMAIL_RE.match(fields["email"]):
        return glue_json({"error": "Invalid email address"}, status_code=400)
    if len(fields["message"]) > config.MAX_VALUES["text_length"]:
        return glue_json({"error": "Message is too long"}, status_code=400)
    if moderation.contains_harmful_content(fields["message"]) or moderation.contains_harmful_content(fields["subject"]):
        return glue_json({"error": HARMFUL_MESSAGE_ERROR}, status_code=400)

    api_key = config.get_env_var("BREVO_API_KEY")
    if not api_key:
        logger.error("BREVO_API_KEY not configured")
        return glue_json({"error": "API key not configured in environment variables"}, status_code=500)
    try:
        result = await run_in_threadpool(mailer.send_contact_message, api_key=api_key, **fields)
    except UpstreamError as exc:
        return glue_json({"error": exc.message}, status_code=exc.status)
    except Exception:
        logger.exception("Failed to send message")
        return glue_json({"error": "Failed to send message. Please try again."}, status_code=500)
    return glue_json({"success": True, "data": result})

async def api_generate_quiz(request: Request):
    if request.method == "OPTIONS":
        return preflight(GLUE_CORS_HEADERS)
    if request.method != "POST":
        return glue_json({"error": "Method not allowed"}, status_code=405)
    try:
        data = await read_json(request)
    except ValueError:
        return glue_json({"error": "Invalid JSON body"}, status_code=400)
    objectives = data.get("learningObjectives") or ""
    options = data.get("options") or {}
    try:
        count, _, _ = quiz_generator.validate_request(objectives, options)
    except ValueError as exc:
        return glue_json({"error": str(exc)}, status_code=400)

    api_key = config.get_env_var("DEEPSEEK_API_KEY") or request.headers.get("x-deepseek-key")
    if not api_key:
        return glue_json({"error": "DeepSeek API key not configured. Please add it in API settings."}, status_code=500)

    user = get_current_user(request)
    user_id = user["id"] if user else None
    if not subscriptions.can_generate_questions(user_id, count):
        return glue_json({
            "error": "Question limit reached for this month",
            "remaining": subscriptions.get_remaining_questions(user_id),
        }, status_code=402)

    try:
        questions = await run_in_threadpool(quiz_generator.generate_quiz, objectives, options, api_key)
    except UpstreamError as exc:
        status = exc.status if exc.status in DEEPSEEK_ERRORS else 500
        return glue_json({"error": DEEPSEEK_ERRORS.get(status, exc.message)}, status_code=status)
    except Exception as exc:
        logger.exception("Error generating quiz")
        return glue_json({"error": str(exc) or "Failed to generate quiz"}, status_code=500)

    if user_id:
        subscriptions.record_usage(user_id, len(questions))
    return glue_json({"questions": questions})

async def api_moderate_content(request: Request):
    if request.method == "OPTIONS":
        return preflight(GLUE_CORS_HEADERS)
    if request.method != "POST":
        return glue_json({"error": "Method not allowed"}, status_code=405)
    try:
        data = await read_json(request)
    except ValueError:
        return glue_json({"error": "Invalid JSON body"}, status_code=400)
    content = data.get("content")
    if not isinstance(content, str):
        return glue_json({"error": "Missing content"}, status_code=400)
    try:
        result = await run_in_threadpool(moderation.moderate_content, content)
    except Exception:
        logger.exception("Error in content moderation")
        return glue_json({
            "flagged": True, "categories": {}, "categoryScores": {},
            "error": "Internal server error",
        }, status_code=500)
    return glue_json(result)

# === Edge functions ===

async def fn_check_subscription(request: Request):
    if request.method == "OPTIONS":
        return preflight(EDGE_CORS_HEADERS)
    try:
        user = get_current_user(request)
        body = subscriptions.check_subscription(user)
    except Exception as exc:
        logger.exception("Subscription check error")
        return edge_json({"error": str(exc)}, status_code=500)
    return edge_json(body, status_code=200 if user else 401)

async def fn_create_checkout(request: Request):
    if request.method == "OPTIONS":
        return preflight(EDGE_CORS_HEADERS)
    if not get_bearer_token(request):
        return edge_json({"error": "Unauthorized"}, status_code=401)
    user = get_current_user(request)
    if not user:
        return edge_json({"error": "Invalid authentication token"}, status_code=401)
    try:
        data = await read_json(request)
    except ValueError:
        return edge_json({"error": "Invalid JSON body"}, status_code=400)
    price_id = data.get("priceId")
    if not price_id:
        return edge_json({"error": "Missing required parameter: priceId"}, status_code=400)
    origin = request.headers.get("origin") or config.APP_ORIGIN
    try:
        url = await run_in_threadpool(billing.create_checkout_session, user, price_id, origin)
    except Exception as exc:
        logger.exception("Error creating checkout session")
        return edge_json({"error": str(exc) or "Error creating checkout session"}, status_code=500)
    return edge_json({"url": url})

async def fn_webhook_stripe(request: Request):
    if request.method == "OPTIONS":
        return preflight(EDGE_CORS_HEADERS)
    signature = request.headers.get("stripe-signature")
    if not signature:
        return edge_json({"error": "No signature"}, status_code=400)
    payload = await request.body()
    try:
        event = billing.construct_event(payload, signature)
    except (ValueError, stripe.SignatureVerificationError) as exc:
        logger.error("Webhook signature verification failed: %s", exc)
        return edge_json({"error": f"Webhook signature verification failed: {exc}"}, status_code=400)
    try:
        await run_in_threadpool(billing.handle_event, event)
    except Exception as exc:
        logger.exception("Webhook error")
        return edge_json({"error": str(exc)}, status_code=500)
    return edge_json({"received": True})

async def fn_handle_user_registration(request: Request):
    if request.method == "OPTIONS":
        return preflight(EDGE_CORS_HEADERS)
    service_key = os.getenv("SERVICE_ROLE_KEY")
    if service_key and get_bearer_token(request) != service_key:
        return edge_json({"error": "Unauthorized"}, status_code=401)
    try:
        data = await read_json(request)
    except ValueError:
        return edge_json({"error": "Invalid request payload"}, status_code=400)
    record = data.get("record") or {}
    if not isinstance(record, dict) or not record.get("id"):
        return edge_json({"error": "Invalid request payload"}, status_code=400)
    try:
        result = subscriptions.provision_new_user(record["id"])
    except LookupError as exc:
        return edge_json({"error": str(exc)}, status_code=404)
    except Exception as exc:
        logger.exception("Error processing user registration")
        return edge_json({"error": str(exc)}, status_code=500)
    return edge_json(result)

async def fn_leaderboard(request: Request):
    if request.method == "OPTIONS":
        return preflight(EDGE_CORS_HEADERS)
    try:
        data = await read_json(request)
    except ValueError:
        return edge_json({"error": "Invalid JSON body"}, status_code=400)

    if request.method == "GET":
        quiz_id = request.query_params.get("quiz_id") or data.get("quiz_id")
        if not quiz_id:
            return edge_json({"error": "Missing quiz_id parameter"}, status_code=400)
        return edge_json({"leaderboard": db.get_leaderboard(quiz_id)})

    if request.method == "POST":
        quiz_id = data.get("quiz_id")
        user_name = str(data.get("user_name") or "").strip()
        score = data.get("score")
        completion_time = data.get("completion_time")
        if not quiz_id or not user_name:
            return edge_json({"error": "quiz_id and user_name are required"}, status_code=400)
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            return edge_json({"error": "score must be a number"}, status_code=400)
        if completion_time is not None and (isinstance(completion_time, bool) or not isinstance(completion_time, int)):
            return edge_json({"error": "completion_time must be an integer"}, status_code=400)
        entry = db.add_leaderboard_entry(quiz_id, user_name, score, completion_time)
        return edge_json({"success": True, "entry": entry})

    return edge_json({"error": "Method not allowed"}, status_code=405)

# === Auth ===

async def api_register(request: Request):
    try:
        data = await read_json(request)
    except ValueError:
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
    email = str(data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    if not EMAIL_RE.match(email):
        return JSONResponse({"error": "Invalid email address"}, status_code=400)
    if not isinstance(password, str):
        return JSONResponse({"error": "Password must be a string"}, status_code=400)
    ok, message = security.validate_strong_password(password)
    if not ok:
        return JSONResponse({"error": message}, status_code=400)
    try:
        user_id = db.create_user(email, password, data.get("displayName"))
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    subscriptions.provision_new_user(user_id)
    return JSONResponse({"user": db.get_user(user_id), "token": db.issue_token(user_id)})

async def api_login(request: Request):
    try:
        data = await read_json(request)
    except ValueError:
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
    password = data.get("password") or ""
    if not isinstance(password, str):
        return JSONResponse({"error": "Invalid email or password"}, status_code=401)
    user = db.verify_user_password(str(data.get("email") or ""), password)
    if not user:
        return JSONResponse({"error": "Invalid email or password"}, status_code=401)
    return JSONResponse({"user": user, "token": db.issue_token(user["id"])})

async def api_logout(request: Request):
    token = get_bearer_token(request)
    if token:
        db.revoke_token(token)
    return JSONResponse({"success": True})

async def api_csrf_token(request: Request):
    owner, _, new_client_id = get_owner(request)
    resp = JSONResponse({"csrfToken": security.issue_csrf_token(owner)})
    return with_client_cookie(resp, new_client_id)

# === Subscription info ===

async def api_subscription_plans(request: Request):
    return JSONResponse(subscriptions.get_subscription_plans())

async def api_subscription_usage(request: Request):
    user = get_current_user(request)
    user_id = user["id"] if user else None
    return JSONResponse({
        "subscription": subscriptions.get_user_subscription(user_id),
        "remaining": subscriptions.get_remaining_questions(user_id),
    })

# === Quizzes & history ===

async def api_save_quiz(request: Request):
    owner, user, new_client_id = get_owner(request)
    if csrf_failed(request, owner, user):
        return JSONResponse({"error": "Invalid CSRF token"}, status_code=403)
    try:
        data = await read_json(request)
        quiz = quiz_store.save_quiz(data, owner=owner)
    except PermissionError as exc:
        return JSONResponse({"error": str(exc)}, status_code=403)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    origin = request.headers.get("origin") or config.APP_ORIGIN
    resp = JSONResponse({"quiz": quiz, "shareUrl": quiz_store.generate_shareable_link(quiz["id"], origin)})
    return with_client_cookie(resp, new_client_id)

async def api_get_quiz(request: Request):
    quiz = quiz_store.get_quiz_by_id(request.path_params["quiz_id"])
    if not quiz:
        return JSONResponse({"error": "Quiz not found"}, status_code=404)
    return JSONResponse(quiz)

async def api_quiz_attempts(request: Request):
    return JSONResponse(quiz_store.get_quiz_attempts_by_quiz_id(request.path_params["quiz_id"]))

async def api_history(request: Request):
    owner, user, new_client_id = get_owner(request)
    if request.method == "GET":
        return with_client_cookie(JSONResponse(quiz_store.load_quiz_history(owner)), new_client_id)
    if csrf_failed(request, owner, user):
        return JSONResponse({"error": "Invalid CSRF token"}, status_code=403)
    quiz_store.clear_all_history(owner)
    return JSONResponse({"success": True})

async def api_history_attempt(request: Request):
    owner, user, _ = get_owner(request)
    if csrf_failed(request, owner, user):
        return JSONResponse({"error": "Invalid CSRF token"}, status_code=403)
    try:
        data = await read_json(request)
    except ValueError:
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
    if not isinstance(data.get("questions"), list) or not isinstance(data.get("userAnswers"), list):
        return JSONResponse({"error": "questions and userAnswers are required"}, status_code=400)
    return JSONResponse(quiz_store.save_quiz_attempt(owner, data))

async def api_review_list(request: Request):
    owner, user, _ = get_owner(request)
    if csrf_failed(request, owner, user):
        return JSONResponse({"error": "Invalid CSRF token"}, status_code=403)
    question_id = request.path_params.get("question_id")
    if request.method == "DELETE":
        if question_id:
            return JSONResponse(quiz_store.remove_from_review_list(owner, question_id))
        quiz_store.clear_review_list(owner)
        return JSONResponse([])
    try:
        data = await read_json(request)
    except ValueError:
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
    question = data.get("question")
    if not isinstance(question, dict) or not question.get("id"):
        return JSONResponse({"error": "A question with an id is required"}, status_code=400)
    return JSONResponse(quiz_store.add_to_review_list(owner, question))

async def api_disputes(request: Request):
    owner, user, _ = get_owner(request)
    question_id = request.path_params.get("question_id")
    if request.method == "GET":
        return JSONResponse({"disputed": quiz_store.is_question_disputed(owner, question_id)})
    if csrf_failed(request, owner, user):
        return JSONResponse({"error": "Invalid CSRF token"}, status_code=403)
    if request.method == "DELETE":
        if question_id:
            quiz_store.remove_disputed_question(owner, question_id)
        else:
            quiz_store.clear_disputed_questions(owner)
        return JSONResponse({"success": True})
    try:
        data = await read_json(request)
        question = data.get("question")
        if not isinstance(question, dict) or not question.get("id"):
            raise ValueError("A question with an id is required")
        record = quiz_store.add_disputed_question(
            owner, question, data.get("userAnswer"), data.get("disputeReason") or ""
        )
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    return JSONResponse(record)

# === Forum ===

def _moderated(text):
    filtered, _ = moderation.filter_user_input(text)
    if filtered is None:
        raise ValueError("Your post contains content that is not allowed")
    return filtered

async def api_forum_posts(request: Request):
    owner, user, new_client_id = get_owner(request)
    if request.method == "GET":
        return with_client_cookie(JSONResponse(forum.get_posts()), new_client_id)
    if csrf_failed(request, owner, user):
        return JSONResponse({"error": "Invalid CSRF token"}, status_code=403)
    try:
        data = await read_json(request)
        title = await run_in_threadpool(_moderated, str(data.get("title") or ""))
        content = await run_in_threadpool(_moderated, str(data.get("content") or ""))
        post = forum.add_post(owner, title, content, data.get("type") or forum.PostType.REGULAR,
                              username=display_name(user))
    except PermissionError as exc:
        return JSONResponse({"error": str(exc)}, status_code=403)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    return JSONResponse(post)

async def api_forum_comment(request: Request):
    owner, user, _ = get_owner(request)
    if csrf_failed(request, owner, user):
        return JSONResponse({"error": "Invalid CSRF token"}, status_code=403)
    try:
        data = await read_json(request)
        content = await run_in_threadpool(_moderated, str(data.get("content") or ""))
        comment = forum.add_comment(owner, request.path_params["post_id"], content,
                                    username=display_name(user))
    except LookupError as exc:
        return JSONResponse({"error": str(exc)}, status_code=404)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    return JSONResponse(comment)

async def api_forum_like(request: Request):
    owner, user, _ = get_owner(request)
    if csrf_failed(request, owner, user):
        return JSONResponse({"error": "Invalid CSRF token"}, status_code=403)
    try:
        likes = forum.like_post(request.path_params["post_id"])
    except LookupError as exc:
        return JSONResponse({"error": str(exc)}, status_code=404)
    return JSONResponse({"likes": likes})

async def api_forum_role(request: Request):
    user = get_current_user(request)
    if not user:
        return JSONResponse({"error": "Not logged in"}, status_code=401)
    try:
        data = await read_json(request)
        role = forum.UserRole(data.get("role"))
    except ValueError:
        return JSONResponse({"error": "Role must be 'admin' or 'user'"}, status_code=400)
    if role is forum.UserRole.ADMIN and user["email"] not in config.FORUM_ADMIN_EMAILS:
        return JSONResponse({"error": "Not allowed to become admin"}, status_code=403)
    return JSONResponse(forum.set_user_role(user["id"], role, username=display_name(user)))

# === App ===
GLUE_METHODS = ["GET", "POST", "PUT", "OPTIONS"]
EDGE_METHODS = ["GET", "POST", "OPTIONS"]

routes = [
    Route("/api/check-api-keys", api_check_api_keys, methods=GLUE_METHODS),
    Route("/api/generate-hint", api_generate_hint, methods=GLUE_METHODS),
    Route("/api/send-message", api_send_message, methods=GLUE_METHODS),
    Route("/api/generate-quiz", api_generate_quiz, methods=GLUE_METHODS),
    Route("/api/moderate-content", api_moderate_content, methods=GLUE_METHODS),
    Route("/functions/v1/check-subscription", fn_check_subscription, methods=EDGE_METHODS),
    Route("/functions/v1/create-checkout", fn_create_checkout, methods=["POST", "OPTIONS"]),
    Route("/functions/v1/webhook-stripe", fn_webhook_stripe, methods=["POST", "OPTIONS"]),
    Route("/functions/v1/handle-user-registration", fn_handle_user_registration, methods=["POST", "OPTIONS"]),
    Route("/functions/v1/leaderboard", fn_leaderboard, methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"]),
    Route("/api/auth/register", api_register, methods=["POST"]),
    Route("/api/auth/login", api_login, methods=["POST"]),
    Route("/api/auth/logout", api_logout, methods=["POST"]),
    Route("/api/csrf-token", api_csrf_token),
    Route("/api/subscription/plans", api_subscription_plans),
    Route("/api/subscription/usage", api_subscription_usage),
    Route("/api/quizzes", api_save_quiz, methods=["POST"]),
    Route("/api/quizzes/{quiz_id}", api_get_quiz),
    Route("/api/quizzes/{quiz_id}/attempts", api_quiz_attempts),
    Route("/api/history", api_history, methods=["GET", "DELETE"]),
    Route("/api/history/attempts", api_history_attempt, methods=["POST"]),
    Route("/api/history/review", api_review_list, methods=["POST", "DELETE"]),
    Route("/api/history/review/{question_id}", api_review_list, methods=["DELETE"]),
    Route("/api/history/disputes", api_disputes, methods=["POST", "DELETE"]),
    Route("/api/history/disputes/{question_id}", api_disputes, methods=["GET", "DELETE"]),
    Route("/api/forum/posts", api_forum_posts, methods=["GET", "POST"]),
    Route("/api/forum/posts/{post_id}/comments", api_forum_comment, methods=["POST"]),
    Route("/api/forum/posts/{post_id}/like", api_forum_like, methods=["POST"]),
    Route("/api/forum/role", api_forum_role, methods=["POST"]),
]

app = Starlette(routes=routes)

if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.getenv("PORT", "8000"))
    print("\n  STEM Quiz API")
    print(f"  Listening on: http://localhost:{port}\n")
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
