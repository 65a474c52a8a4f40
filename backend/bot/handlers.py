"""
Telegram update dispatch for the photo bot.

Flow: photo -> category -> gender -> model carousel -> background carousel
-> review -> generate_photo, then an optional animate_video. Conversation
state and the last result live in the Django cache so every worker
process sees the same session.
"""
import logging
import os
import re
import tempfile
import threading

import requests
from django.conf import settings
from django.core.cache import cache
from django.db import close_old_connections

from backend.studio.geminigen import GeminiGenClient, GenerationError
from backend.studio.presets import MODELS, SHOE_MODELS, BACKGROUNDS, asset_path, asset_url, find_background
from backend.studio.uploads import UploadError, extension_for_content_type, fetch_image, remove_temp_file

from . import services
from .locales import t
from .telegram import TelegramClient, TelegramError, inline_keyboard

logger = logging.getLogger('backend.bot')

STATE_TTL = 60 * 60
RECENT_RESULT_TTL = 24 * 60 * 60
VIDEO_JOB_TTL = 10 * 60

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
WAITING_FOR_EMAIL = 'waiting_for_email'

PROGRESS_STEPS = ('progress.analyzing', 'progress.fitting', 'progress.lighting', 'progress.rendering')

ETHNICITY_DESCRIPTIONS = {
    'tunisian': 'Tunisian / North African features',
    'caucasian': 'Caucasian features',
}


# Session storage

def _state_key(user_id):
    return f'bot:state:{user_id}'


def get_state(user_id):
    return cache.get(_state_key(user_id))


def set_state(user_id, state):
    cache.set(_state_key(user_id), state, STATE_TTL)


def clear_state(user_id):
    cache.delete(_state_key(user_id))


def _recent_key(user_id):
    return f'bot:recent:{user_id}'


def _video_job_key(user_id):
    return f'bot:video_job:{user_id}'


def is_admin(user_id):
    return str(user_id) in {str(admin_id) for admin_id in settings.TELEGRAM_ADMIN_IDS}


def run_job(func, *args):
    """Run a long job off the webhook request unless configured inline"""
    if settings.TELEGRAM_RUN_JOBS_INLINE:
        func(*args)
        return

    def _target():
        try:
            func(*args)
        finally:
            close_old_connections()

    thread = threading.Thread(target=_target)
    thread.daemon = True
    thread.start()


class UpdateContext:
    """The pieces of one Telegram update the handlers need, plus reply helpers"""

    def __init__(self, client, update):
        self.client = client
        self.callback_query = update.get('callback_query')
        message = update.get('message') or (self.callback_query or {}).get('message') or {}
        sender = (self.callback_query or message).get('from') or {}

        self.user_id = sender.get('id')
        self.username = sender.get('username')
        self.chat_id = (message.get('chat') or {}).get('id') or self.user_id
        self.message_id = message.get('message_id')
        self.text = (message.get('text') or '').strip() if not self.callback_query else ''
        self.photo = message.get('photo') if not self.callback_query else None
        self.data = (self.callback_query or {}).get('data') or ''
        self.lang = 'en'

    def reply(self, text, keyboard=None, markdown=False):
        return self.client.send_message(
            self.chat_id, text, reply_markup=keyboard, parse_mode='Markdown' if markdown else None
        )

    def reply_photo(self, photo, caption=None, keyboard=None, markdown=False):
        return self.client.send_photo(
            self.chat_id, photo, caption=caption, reply_markup=keyboard,
            parse_mode='Markdown' if markdown else None,
        )

    def answer(self, text=None):
        if not self.callback_query:
            return
        try:
            self.client.answer_callback_query(self.callback_query['id'], text)
        except TelegramError as e:
            logger.debug(f"answerCallbackQuery failed: {e}")

    def delete_message(self):
        if not self.message_id:
            return
        try:
            self.client.delete_message(self.chat_id, self.message_id)
        except TelegramError as e:
            logger.debug(f"Could not delete message {self.message_id}: {e}")

    def edit_text(self, text, keyboard=None, markdown=False):
        try:
            self.client.edit_message_text(
                self.chat_id, self.message_id, text, reply_markup=keyboard,
                parse_mode='Markdown' if markdown else None,
            )
        except TelegramError as e:
            logger.debug(f"Could not edit message {self.message_id}: {e}")
            self.reply(text, keyboard, markdown)


# Keyboards

def language_keyboard():
    return inline_keyboard([[('English 🇬🇧', 'set_lang_en'), ('Tounsi 🇹🇳', 'set_lang_tn')]])


def welcome_keyboard(lang):
    return inline_keyboard([
        [(t('buttons.start_creating', lang), 'start_creating')],
        [(t('buttons.tutorial', lang), 'tutorial'), (t('buttons.pricing', lang), 'pricing_cb')],
    ])


def category_keyboard(lang):
    return inline_keyboard([[(t('buttons.clothes', lang), 'cat_clothes'), (t('buttons.shoes', lang), 'cat_shoes')]])


def gender_keyboard(lang):
    return inline_keyboard([[(t('buttons.female', lang), 'gender_female'), (t('buttons.male', lang), 'gender_male')]])


def carousel_keyboard(prefix, item_id, name, lang):
    return inline_keyboard([[
        ('⬅️', f'{prefix}_prev'),
        (t('buttons.select', lang, {'name': name}), f'{prefix}_select_{item_id}'),
        ('➡️', f'{prefix}_next'),
    ]])


def _localized(value, lang):
    if isinstance(value, dict):
        return value.get(lang) or value.get('en') or ''
    return value or ''


def _media_for(entry):
    """Local asset path when installed, otherwise its public URL"""
    path = asset_path(entry['file'])
    if os.path.exists(path):
        return path
    return f"{settings.PUBLIC_BASE_URL}{asset_url(entry['file'])}"


def _models_for(state):
    models = SHOE_MODELS if state.get('category') == 'shoes' else MODELS
    return [model for model in models if model['gender'] == state.get('gender')] or list(models)


def _show_carousel(ctx, media, caption, keyboard, replace_message):
    """
    Show a carousel card.

    Coming from a text message the card replaces it; inside the carousel
    the photo is edited in place. Text is sent if the photo cannot be.
    """
    try:
        if replace_message:
            ctx.delete_message()
            ctx.reply_photo(media, caption=caption, keyboard=keyboard, markdown=True)
        else:
            ctx.client.edit_message_media(
                ctx.chat_id, ctx.message_id, media, caption=caption,
                reply_markup=keyboard, parse_mode='Markdown',
            )
    except TelegramError as e:
        logger.warning(f"Carousel photo failed for user {ctx.user_id}: {e}")
        ctx.reply(caption, keyboard, markdown=True)


def send_model_selection(ctx, state, index, replace_message=False):
    models = _models_for(state)
    i = index % len(models)
    state['model_index'] = i
    set_state(ctx.user_id, state)

    model = models[i]
    name = _localized(model['name'], ctx.lang)
    lines = [f"👤 **{name}**"]
    if model.get('style'):
        lines.append(f"🎭 {_localized(model['style'], ctx.lang)}")
    caption = '\n'.join(lines) + f"\n\n{model['description']}"

    _show_carousel(ctx, _media_for(model), caption, carousel_keyboard('model', model['id'], name, ctx.lang), replace_message)


def send_background_selection(ctx, state, index):
    i = index % len(BACKGROUNDS)
    state['bg_index'] = i
    set_state(ctx.user_id, state)

    background = BACKGROUNDS[i]
    name = _localized(background['name'], ctx.lang)
    caption = f"🏙️ **{name}**"
    _show_carousel(
        ctx, _media_for(background), caption,
        carousel_keyboard('bg', background['id'], name, ctx.lang), replace_message=False,
    )


# Commands

def cmd_start(ctx, user, args):
    clear_state(ctx.user_id)
    caption = t('welcome_hero_caption', ctx.lang)
    banner = asset_path('banner/banner.png')
    if os.path.exists(banner):
        ctx.reply_photo(banner, caption=caption, keyboard=welcome_keyboard(ctx.lang), markdown=True)
    else:
        ctx.reply(caption, welcome_keyboard(ctx.lang), markdown=True)


def cmd_myid(ctx, user, args):
    ctx.reply(f"Your Telegram ID is: `{ctx.user_id}`", markdown=True)


def cmd_credits(ctx, user, args):
    ctx.reply(t('credits_remaining', ctx.lang, {'credits': user.credits}))


def cmd_profile(ctx, user, args):
    ctx.reply(t('profile', ctx.lang, {
        'id': ctx.user_id, 'credits': user.credits, 'gens': user.generations_count,
    }), markdown=True)


def cmd_lang(ctx, user, args):
    ctx.reply(t('choose_language', ctx.lang), language_keyboard())


def cmd_stop(ctx, user, args):
    clear_state(ctx.user_id)
    ctx.reply(t('stop_success', ctx.lang))


def _static_reply(key):
    def handler(ctx, user, args):
        ctx.reply(t(key, ctx.lang), markdown=True)
    return handler


def _parse_amount(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _notify(client, telegram_id, text):
    try:
        client.send_message(telegram_id, text)
        return True
    except TelegramError as e:
        logger.warning(f"Could not notify user {telegram_id}: {e}")
        return False


def cmd_setcredits(ctx, user, args):
    if not is_admin(ctx.user_id):
        ctx.reply(t('admin_only', ctx.lang))
        return
    if len(args) != 2:
        ctx.reply('Usage: /setcredits <user_id> <amount>')
        return
    target_id, amount = _parse_amount(args[0]), _parse_amount(args[1])
    if target_id is None or amount is None:
        ctx.reply('Invalid amount.')
        return
    if services.get_user(target_id) is None:
        ctx.reply('User not found. Ask them to /start first.')
        return

    target = services.set_credits(target_id, amount)
    logger.info(f"Admin {ctx.user_id} set credits of {target_id} to {amount}")
    ctx.reply(t('credits_updated', ctx.lang, {'id': target_id, 'amount': amount}))
    _notify(ctx.client, target_id, t('credits_received', target.language, {'amount': amount}))


def cmd_gift(ctx, user, args):
    if len(args) != 2:
        ctx.reply('Usage: /gift <user_id> <amount>')
        return
    target_id, amount = _parse_amount(args[0]), _parse_amount(args[1])
    if target_id is None or amount is None or amount <= 0:
        ctx.reply('Invalid amount.')
        return

    target = services.increment_credits(target_id, amount)
    if target is None:
        ctx.reply('User not found.')
        return
    logger.info(f"Admin {ctx.user_id} gifted {amount} credits to {target_id}")
    ctx.reply(t('gift_success', ctx.lang, {'amount': amount, 'id': target_id}))
    _notify(ctx.client, target_id, t('gift_received', target.language, {'amount': amount}))


def cmd_giftall(ctx, user, args):
    if len(args) != 1:
        ctx.reply('Usage: /giftall <amount>')
        return
    amount = _parse_amount(args[0])
    if amount is None or amount <= 0:
        ctx.reply('Invalid amount.')
        return

    count = 0
    for telegram_id in services.all_telegram_ids():
        target = services.increment_credits(telegram_id, amount)
        if target is None:
            continue
        count += 1
        _notify(ctx.client, telegram_id, t('gift_received', target.language, {'amount': amount}))
    logger.info(f"Admin {ctx.user_id} gifted {amount} credits to {count} users")
    ctx.reply(f"✅ Gifted {amount} credits to {count} users.")


def cmd_broadcast(ctx, user, args):
    if not args:
        ctx.reply('Usage: /broadcast <message>')
        return
    text = f"📢 **Announcement**\n\n{' '.join(args)}"
    count = 0
    for telegram_id in services.all_telegram_ids():
        try:
            ctx.client.send_message(telegram_id, text, parse_mode='Markdown')
            count += 1
        except TelegramError as e:
            logger.warning(f"Broadcast to {telegram_id} failed: {e}")
    ctx.reply(t('broadcast_sent', ctx.lang, {'count': count}))


def _set_banned(ctx, args, banned):
    command, key = ('/ban', 'ban_success') if banned else ('/unban', 'unban_success')
    if len(args) != 1 or _parse_amount(args[0]) is None:
        ctx.reply(f'Usage: {command} <user_id>')
        return
    if not services.set_banned(args[0], banned):
        ctx.reply('User not found.')
        return
    logger.info(f"Admin {ctx.user_id} {'banned' if banned else 'unbanned'} {args[0]}")
    ctx.reply(t(key, ctx.lang, {'id': args[0]}))


def cmd_ban(ctx, user, args):
    _set_banned(ctx, args, True)


def cmd_unban(ctx, user, args):
    _set_banned(ctx, args, False)


def cmd_userinfo(ctx, user, args):
    if len(args) != 1 or _parse_amount(args[0]) is None:
        ctx.reply('Usage: /userinfo <user_id>')
        return
    target = services.get_user(args[0])
    if target is None:
        ctx.reply('User not found.')
        return
    ctx.reply(t('user_info', ctx.lang, {
        'id': target.telegram_id,
        'username': target.username or 'N/A',
        'credits': target.credits,
        'gens': target.generations_count,
        'banned': 'Yes' if target.is_banned else 'No',
    }), markdown=True)


def cmd_stats(ctx, user, args):
    stats = services.get_stats()
    ctx.reply(t('stats', ctx.lang, {
        'users': stats['total_users'], 'gens': stats['total_generations'],
    }), markdown=True)


COMMANDS = {
    'start': cmd_start,
    'myid': cmd_myid,
    'credits': cmd_credits,
    'profile': cmd_profile,
    'lang': cmd_lang,
    'stop': cmd_stop,
    'help': _static_reply('help'),
    'support': _static_reply('support_msg'),
    'pricing': _static_reply('pricing_msg'),
    'terms': _static_reply('terms_msg'),
    'setcredits': cmd_setcredits,
}

# Silently ignored for non-admins
ADMIN_COMMANDS = {
    'gift': cmd_gift,
    'giftall': cmd_giftall,
    'broadcast': cmd_broadcast,
    'ban': cmd_ban,
    'unban': cmd_unban,
    'userinfo': cmd_userinfo,
    'stats': cmd_stats,
}


def handle_command(ctx, user):
    parts = ctx.text.split()
    name = parts[0][1:].split('@')[0].lower()
    args = parts[1:]

    if name in ADMIN_COMMANDS:
        if is_admin(ctx.user_id):
            ADMIN_COMMANDS[name](ctx, user, args)
        return
    handler = COMMANDS.get(name)
    if handler is not None:
        handler(ctx, user, args)


def handle_text(ctx, user):
    state = get_state(ctx.user_id)
    if not state or state.get('step') != WAITING_FOR_EMAIL:
        return

    email = ctx.text
    if not EMAIL_PATTERN.match(email):
        ctx.reply(t('invalid_email', ctx.lang))
        return

    services.set_email(ctx.user_id, email)
    clear_state(ctx.user_id)
    ctx.reply(t('email_saved', ctx.lang))
    ctx.reply(t('welcome', ctx.lang, {'id': ctx.user_id, 'credits': user.credits}), language_keyboard(), markdown=True)


def handle_photo(ctx, user):
    if user.credits <= 0:
        ctx.reply(t('insufficient_credits', ctx.lang))
        return

    largest = max(ctx.photo, key=lambda size: size.get('file_size') or size.get('width', 0) * size.get('height', 0))
    set_state(ctx.user_id, {'file_id': largest['file_id'], 'step': 'category'})
    ctx.reply(t('choose_category', ctx.lang), category_keyboard(ctx.lang))


# Callbacks

def cb_start_creating(ctx, user, value):
    if not user.email:
        set_state(ctx.user_id, {'step': WAITING_FOR_EMAIL})
        ctx.reply(t('ask_email_pro', ctx.lang))
        return
    ctx.reply(t('choose_language', ctx.lang), language_keyboard())


def cb_tutorial(ctx, user, value):
    ctx.reply(t('tutorial_msg', ctx.lang), markdown=True)


def cb_pricing(ctx, user, value):
    ctx.reply(t('pricing_msg', ctx.lang), markdown=True)


def cb_set_lang(ctx, user, value):
    if value not in ('en', 'tn'):
        return
    services.set_language(ctx.user_id, value)
    ctx.lang = value
    ctx.reply(t('lang_set', value))


def cb_category(ctx, user, value):
    state = get_state(ctx.user_id)
    if not state:
        ctx.reply(t('session_expired', ctx.lang))
        return
    state.update({'category': value, 'step': 'gender'})
    set_state(ctx.user_id, state)
    ctx.edit_text(t('choose_gender', ctx.lang), gender_keyboard(ctx.lang))


def cb_gender(ctx, user, value):
    state = get_state(ctx.user_id)
    if not state:
        ctx.reply(t('session_expired', ctx.lang))
        return
    state.update({'gender': value, 'step': 'model'})
    send_model_selection(ctx, state, 0, replace_message=True)


def _carousel_step(attribute, show):
    def handler(ctx, user, value):
        state = get_state(ctx.user_id)
        if not state:
            ctx.answer('Session expired')
            return
        offset = -1 if value == 'prev' else 1
        show(ctx, state, state.get(attribute, 0) + offset)
    return handler


def cb_model_select(ctx, user, value):
    state = get_state(ctx.user_id)
    if not state:
        ctx.reply(t('session_expired', ctx.lang))
        return
    model = next((model for model in _models_for(state) if model['id'] == value), None)
    if model is None:
        ctx.reply(t('session_expired', ctx.lang))
        return
    state.update({'model_id': model['id'], 'step': 'background'})
    send_background_selection(ctx, state, 0)


def cb_bg_select(ctx, user, value):
    state = get_state(ctx.user_id)
    background = find_background(value)
    if not state or not state.get('model_id') or background is None:
        ctx.reply(t('session_expired', ctx.lang))
        return
    state.update({'background_id': background['id'], 'step': 'review'})
    set_state(ctx.user_id, state)

    model = next((m for m in _models_for(state) if m['id'] == state['model_id']), None) or {}
    ctx.delete_message()
    ctx.reply(
        t('review', ctx.lang, {
            'model': _localized(model.get('name'), ctx.lang),
            'background': _localized(background['name'], ctx.lang),
            'category': state.get('category'),
        }),
        inline_keyboard([
            [(t('buttons.generate', ctx.lang), 'generate_photo')],
            [(t('buttons.start_over', ctx.lang), 'start_over')],
        ]),
        markdown=True,
    )


def cb_start_over(ctx, user, value):
    ctx.delete_message()
    clear_state(ctx.user_id)
    ctx.reply(t('start_over', ctx.lang))


def classify_error(error):
    """Bucket a generation failure into one of the localized error messages"""
    message = str(error).lower()
    if isinstance(error, requests.Timeout) or 'timeout' in message or 'timed out' in message:
        return 'timeout'
    if any(word in message for word in ('api', '429', 'quota', 'rate limit', 'unauthorized', 'forbidden')):
        return 'api_error'
    if isinstance(error, requests.ConnectionError) or 'network' in message or 'connection' in message:
        return 'network_error'
    if any(word in message for word in ('invalid', 'malformed', 'unsupported')):
        return 'invalid_input'
    # RequestException is an OSError too
    if (isinstance(error, OSError) and not isinstance(error, requests.RequestException)) or 'file' in message:
        return 'file_error'
    return 'generic'


def _send_progress(ctx, text, edit=False):
    """Progress notices are best effort; the charged job runs either way"""
    try:
        if edit:
            ctx.edit_text(text, markdown=True)
        else:
            ctx.reply(text)
    except TelegramError as e:
        logger.warning(f"Progress message failed for user {ctx.user_id}: {e}")


def _refund_job(ctx, text):
    services.refund_credit(ctx.user_id)
    _notify(ctx.client, ctx.chat_id, text)


def _start_charged_job(ctx, func, *args):
    """Start a job that already holds one credit; refund when it cannot start"""
    try:
        run_job(func, ctx, *args)
    except RuntimeError as e:
        logger.error(f"Could not start {func.__name__} for user {ctx.user_id}: {e}")
        _refund_job(ctx, t('errors.generic', ctx.lang))
        return False
    return True


def cb_generate_photo(ctx, user, value):
    state = get_state(ctx.user_id)
    if not state or state.get('step') != 'review':
        ctx.reply(t('session_expired', ctx.lang))
        return
    if services.deduct_credit(ctx.user_id) is None:
        ctx.reply(t('insufficient_credits', ctx.lang))
        return

    # The session is consumed by this job; a second tap finds no review step
    clear_state(ctx.user_id)
    _send_progress(ctx, t(PROGRESS_STEPS[0], ctx.lang), edit=True)
    _start_charged_job(ctx, generate_photo_job, state)


def _download_telegram_photo(ctx, file_id):
    content, content_type = fetch_image(ctx.client.get_file_url(file_id))
    suffix = f".{extension_for_content_type(content_type)}"
    with tempfile.NamedTemporaryFile(prefix=f'bot-{ctx.user_id}-', suffix=suffix, delete=False) as tmp:
        tmp.write(content)
    return tmp.name


def generate_photo_job(ctx, state):
    models = SHOE_MODELS if state.get('category') == 'shoes' else MODELS
    model = next((m for m in models if m['id'] == state['model_id']), None) or models[0]
    background = find_background(state['background_id']) or BACKGROUNDS[0]
    ethnicity = model.get('ethnicity', 'tunisian')
    temp_path = None
    delivered = False

    try:
        ctx.client.send_chat_action(ctx.chat_id, 'upload_photo')
        temp_path = _download_telegram_photo(ctx, state['file_id'])

        reference_path = asset_path(model['file'])
        options = {
            'category': state.get('category'),
            'gender': model['gender'],
            'model_persona': {'gender': model['gender'], 'ethnicity': ethnicity},
            'model_reference_path': reference_path if os.path.exists(reference_path) else None,
        }
        if state.get('category') == 'shoes':
            options['shoe_model_description'] = model['description']
        else:
            options['model_description'] = model['description']

        logger.info(f"Bot generation started for user {ctx.user_id}: category={state.get('category')}, model={model['id']}")
        result = GeminiGenClient().generate_image(temp_path, f"Backdrop: {background['prompt']}", options)
        if not result.get('imageUrl'):
            raise GenerationError('No image URL returned')

        cache.set(_recent_key(ctx.user_id), {
            'reference_url': result.get('downloadUrl') or result['imageUrl'],
            'image_url': result['imageUrl'],
            'gender': model['gender'],
            'ethnicity': ethnicity,
            'category': state.get('category'),
            'style_label': 'Custom',
            'pose_prompt': 'Natural',
            'backdrop_prompt': background['prompt'],
        }, RECENT_RESULT_TTL)

        user = services.get_user(ctx.user_id)
        ctx.delete_message()
        ctx.reply_photo(result['imageUrl'], caption=t('result_caption', ctx.lang, {
            'style': 'Custom', 'gender': model['gender'], 'ethnicity': 'Tunisian',
            'credits': user.credits if user else 0,
        }), markdown=True)
        delivered = True
        logger.info(f"Bot generation finished for user {ctx.user_id}: {result['imageUrl']}")
        ctx.reply(t('video_offer', ctx.lang), inline_keyboard([[(t('buttons.animate', ctx.lang), 'animate_video')]]))

    except (GenerationError, TelegramError, UploadError, requests.RequestException, OSError) as e:
        if delivered:
            logger.warning(f"Video offer failed for user {ctx.user_id}: {e}")
        else:
            logger.error(f"Bot generation failed for user {ctx.user_id}: {e}")
            _refund_job(ctx, t(f'errors.{classify_error(e)}', ctx.lang))
    except Exception as e:
        # Last stop of a background job: the credit goes back whatever broke
        logger.error(f"Bot generation crashed for user {ctx.user_id}: {e}", exc_info=True)
        if not delivered:
            _refund_job(ctx, t('errors.generic', ctx.lang))
    finally:
        remove_temp_file(temp_path)


def build_video_prompt(context):
    """Motion and persona cues for animating the last generated photo"""
    persona = []
    if context.get('gender'):
        persona.append(f"{context['gender']} model")
    if context.get('ethnicity'):
        persona.append(ETHNICITY_DESCRIPTIONS.get(context['ethnicity'], context['ethnicity']))

    if context.get('category') == 'shoes':
        motion = (
            'Showcase the shoes with a smooth 360 orbit around the feet. Start with a hero shot then rotate to '
            'front, side, and back angles. Include quick close-ups of the sole, heel, and side profile.'
        )
    else:
        motion = (
            'The model performs a slow 360-degree turn-in-place showing front, side, and back of the outfit. '
            'Camera gently circles to keep the model centered with clean studio framing.'
        )

    if context.get('color_name'):
        color_lock = f"Lock garment color to {context['color_name']}; no hue shifts or saturation drift."
    else:
        color_lock = 'Keep garment colors perfectly accurate; no hue shifts.'

    cues = [
        'Create a photorealistic 8-second 16:9 fashion video at 1080p using Veo 3.1 Fast.',
        motion,
        'Camera movement is cinematic and stable, no flicker or glitches. Natural skin motion, fabric physics, soft studio lighting.',
        color_lock,
        f"Use a {' with '.join(persona)}." if persona else '',
        f"Style reference: {context['style_label']}." if context.get('style_label') else '',
        f"Pose direction: {context['pose_prompt']}" if context.get('pose_prompt') else '',
        f"Backdrop: {context['backdrop_prompt']}" if context.get('backdrop_prompt') else '',
        'High detail, commercial quality, realistic shading and texture.',
    ]
    return ' '.join(cue for cue in cues if cue)


def cb_animate_video(ctx, user, value):
    recent = cache.get(_recent_key(ctx.user_id))
    if not recent or not recent.get('reference_url'):
        ctx.reply(t('video_no_recent', ctx.lang))
        return
    if not cache.add(_video_job_key(ctx.user_id), True, VIDEO_JOB_TTL):
        ctx.reply(t('video_in_progress', ctx.lang))
        return
    if services.deduct_credit(ctx.user_id) is None:
        cache.delete(_video_job_key(ctx.user_id))
        ctx.reply(t('insufficient_credits', ctx.lang))
        return

    _send_progress(ctx, t('video_generating', ctx.lang))
    if not _start_charged_job(ctx, animate_video_job, recent):
        cache.delete(_video_job_key(ctx.user_id))


def animate_video_job(ctx, recent):
    delivered = False
    try:
        ctx.client.send_chat_action(ctx.chat_id, 'record_video')
        result = GeminiGenClient().generate_video_from_image(
            recent['reference_url'], build_video_prompt(recent), {'category': recent.get('category')}
        )
        if not result.get('videoUrl'):
            raise GenerationError('No video URL returned')
        ctx.client.send_video(ctx.chat_id, result['videoUrl'], caption=t('video_ready', ctx.lang))
        delivered = True
        logger.info(f"Bot video finished for user {ctx.user_id}: {result['videoUrl']}")
    except (GenerationError, TelegramError, requests.RequestException) as e:
        logger.error(f"Bot video failed for user {ctx.user_id}: {e}")
        key = 'video_premium_required' if 'premium plan' in str(e).lower() else 'video_failed'
        _refund_job(ctx, t(key, ctx.lang))
    except Exception as e:
        logger.error(f"Bot video crashed for user {ctx.user_id}: {e}", exc_info=True)
        if not delivered:
            _refund_job(ctx, t('video_failed', ctx.lang))
    finally:
        cache.delete(_video_job_key(ctx.user_id))


CALLBACKS = {
    'start_creating': cb_start_creating,
    'tutorial': cb_tutorial,
    'pricing_cb': cb_pricing,
    'model_prev': _carousel_step('model_index', send_model_selection),
    'model_next': _carousel_step('model_index', send_model_selection),
    'bg_prev': _carousel_step('bg_index', send_background_selection),
    'bg_next': _carousel_step('bg_index', send_background_selection),
    'start_over': cb_start_over,
    'generate_photo': cb_generate_photo,
    'animate_video': cb_animate_video,
}

CALLBACK_PREFIXES = (
    ('set_lang_', cb_set_lang),
    ('cat_', cb_category),
    ('gender_', cb_gender),
    ('model_select_', cb_model_select),
    ('bg_select_', cb_bg_select),
)


def handle_callback(ctx, user):
    ctx.answer()
    data = ctx.data
    handler = CALLBACKS.get(data)
    if handler is not None:
        handler(ctx, user, data.rsplit('_', 1)[-1])
        return
    for prefix, prefixed_handler in CALLBACK_PREFIXES:
        if data.startswith(prefix):
            prefixed_handler(ctx, user, data[len(prefix):])
            return
    logger.debug(f"Unhandled callback data: {data}")


def handle_update(update, client=None):
    """Dispatch one webhook update; unknown update types are ignored"""
    ctx = UpdateContext(client or TelegramClient(), update)
    if ctx.user_id is None:
        return

    user = services.get_or_create_user(ctx.user_id, ctx.username)
    ctx.lang = user.language or 'en'
    if user.is_banned and not is_admin(ctx.user_id):
        ctx.answer()
        ctx.reply(t('banned_msg', ctx.lang))
        return

    if ctx.callback_query:
        handle_callback(ctx, user)
    elif ctx.photo:
        handle_photo(ctx, user)
    elif ctx.text.startswith('/'):
        handle_command(ctx, user)
    elif ctx.text:
        handle_text(ctx, user)
