from django.conf import settings
from django.db import DatabaseError
from django.http import JsonResponse
from django.utils.crypto import constant_time_compare
from django.views.decorators.csrf import csrf_exempt
import json
import logging

from .account_linking import setup_account_link
from .leave_ai import build_intent_parser
from .message_handlers import handle_telegram_message
from .repository import DjangoLeaveRepository

logger = logging.getLogger(__name__)

SECRET_TOKEN_HEADER = 'X-Telegram-Bot-Api-Secret-Token'


def _read_json(request):
    try:
        return json.loads(request.body.decode('utf-8'))
    except (UnicodeDecodeError, ValueError) as e:
        logger.warning(f"Invalid JSON body on {request.path}: {e}")
        return None


@csrf_exempt
def telegram_webhook(request):
    if request.method == 'GET':
        return JsonResponse({'message': 'Telegram webhook endpoint', 'status': 'active'})

    if request.method != 'POST':
        return JsonResponse({'error': 'Invalid request method'}, status=405)

    secret = settings.TELEGRAM_WEBHOOK_SECRET
    if secret and not constant_time_compare(request.headers.get(SECRET_TOKEN_HEADER, ''), secret):
        logger.warning("Rejected Telegram webhook call with a bad secret token")
        return JsonResponse({'error': 'Forbidden'}, status=403)

    body = _read_json(request)
    if not isinstance(body, dict):
        return JsonResponse({'error': 'Invalid JSON body'}, status=400)

    try:
        outcome = handle_telegram_message(
            body.get('message'),
            parser=build_intent_parser(),
            repository=DjangoLeaveRepository(),
        )
        logger.info(f"Telegram update {body.get('update_id')} handled: {outcome}")
    except Exception:
        logger.exception("Error processing Telegram webhook")
        return JsonResponse({'error': 'Internal server error'}, status=500)

    return JsonResponse({'ok': True})


@csrf_exempt
def telegram_setup_user(request):
    if request.method == 'GET':
        return JsonResponse({
            'message': 'Telegram user setup endpoint',
            'usage': 'POST with { telegram_user_id, user_email, telegram_username?, '
                     'telegram_first_name?, telegram_last_name? }',
        })

    if request.method != 'POST':
        return JsonResponse({'error': 'Invalid request method'}, status=405)

    token = settings.TELEGRAM_SETUP_TOKEN
    if token and not constant_time_compare(request.headers.get('Authorization', ''), f"Bearer {token}"):
        return JsonResponse({'error': 'Unauthorized'}, status=401)

    body = _read_json(request)
    if not isinstance(body, dict):
        return JsonResponse({'error': 'Invalid JSON body'}, status=400)

    telegram_user_id = body.get('telegram_user_id')
    user_email = body.get('user_email')
    if not telegram_user_id or not user_email:
        return JsonResponse(
            {'error': 'Missing required fields: telegram_user_id and user_email'},
            status=400,
        )

    try:
        telegram_user_id = int(telegram_user_id)
    except (TypeError, ValueError):
        return JsonResponse({'error': 'telegram_user_id must be an integer'}, status=400)

    try:
        link, created = setup_account_link(
            DjangoLeaveRepository(),
            telegram_user_id,
            str(user_email),
            telegram_username=body.get('telegram_username'),
            telegram_first_name=body.get('telegram_first_name'),
            telegram_last_name=body.get('telegram_last_name'),
        )
    except DatabaseError as e:
        logger.error(f"Error setting up telegram user {telegram_user_id}: {e}")
        return JsonResponse({'error': 'Failed to setup telegram user mapping'}, status=500)

    if link is None:
        return JsonResponse({'error': f'No user found with email {user_email}'}, status=404)

    logger.info(f"Telegram user {telegram_user_id} mapped to {link.email} (created={created})")
    return JsonResponse({
        'success': True,
        'mapping_id': link.pk,
        'message': 'Telegram user mapping created/updated successfully',
    })
