"""
Minimal Telegram Bot API client.

Only the calls the webhook bot needs are wrapped. Photos and videos may be
given as a URL, a Telegram file id or a local path; local files are
uploaded as multipart.
"""
import json
import logging
import os

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

API_BASE_URL = 'https://api.telegram.org'
REQUEST_TIMEOUT = 30


class TelegramError(Exception):
    """Raised when the Bot API answers with ok=false or cannot be reached"""

    def __init__(self, message, error_code=None):
        super().__init__(message)
        self.error_code = error_code


def inline_keyboard(rows):
    """Build reply_markup from rows of (text, callback_data) pairs"""
    return {
        'inline_keyboard': [
            [{'text': text, 'callback_data': data} for text, data in row]
            for row in rows
        ]
    }


class TelegramClient:
    def __init__(self, token=None, session=None):
        self.token = token if token is not None else settings.TELEGRAM_BOT_TOKEN
        self.session = session or requests.Session()

    @property
    def configured(self):
        return bool(self.token)

    def _url(self, method):
        return f"{API_BASE_URL}/bot{self.token}/{method}"

    def call(self, method, payload=None, files=None):
        if not self.token:
            raise TelegramError('TELEGRAM_BOT_TOKEN is not set')

        payload = {key: value for key, value in (payload or {}).items() if value is not None}
        try:
            if files:
                # Multipart bodies cannot carry nested JSON
                data = {
                    key: json.dumps(value) if isinstance(value, (dict, list)) else value
                    for key, value in payload.items()
                }
                response = self.session.post(self._url(method), data=data, files=files, timeout=REQUEST_TIMEOUT)
            else:
                response = self.session.post(self._url(method), json=payload, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise TelegramError(f"{method} failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            raise TelegramError(f"{method} returned HTTP {response.status_code}")

        if not body.get('ok'):
            description = body.get('description') or f"HTTP {response.status_code}"
            logger.warning(f"Telegram {method} failed: {description}")
            raise TelegramError(description, body.get('error_code'))
        return body.get('result')

    def _send_media(self, method, field, chat_id, media, payload):
        payload = dict(payload, chat_id=chat_id)
        if isinstance(media, str) and os.path.isfile(media):
            with open(media, 'rb') as handle:
                return self.call(method, payload, files={field: (os.path.basename(media), handle)})
        payload[field] = media
        return self.call(method, payload)

    def send_message(self, chat_id, text, reply_markup=None, parse_mode=None):
        return self.call('sendMessage', {
            'chat_id': chat_id,
            'text': text,
            'reply_markup': reply_markup,
            'parse_mode': parse_mode,
        })

    def send_photo(self, chat_id, photo, caption=None, reply_markup=None, parse_mode=None):
        return self._send_media('sendPhoto', 'photo', chat_id, photo, {
            'caption': caption,
            'reply_markup': reply_markup,
            'parse_mode': parse_mode,
        })

    def send_video(self, chat_id, video, caption=None):
        return self._send_media('sendVideo', 'video', chat_id, video, {'caption': caption})

    def edit_message_text(self, chat_id, message_id, text, reply_markup=None, parse_mode=None):
        return self.call('editMessageText', {
            'chat_id': chat_id,
            'message_id': message_id,
            'text': text,
            'reply_markup': reply_markup,
            'parse_mode': parse_mode,
        })

    def edit_message_media(self, chat_id, message_id, photo, caption=None, reply_markup=None, parse_mode=None):
        media = {'type': 'photo', 'caption': caption, 'parse_mode': parse_mode}
        media = {key: value for key, value in media.items() if value is not None}
        payload = {'chat_id': chat_id, 'message_id': message_id, 'reply_markup': reply_markup}
        if isinstance(photo, str) and os.path.isfile(photo):
            media['media'] = 'attach://photo'
            payload['media'] = media
            with open(photo, 'rb') as handle:
                return self.call('editMessageMedia', payload, files={'photo': (os.path.basename(photo), handle)})
        media['media'] = photo
        payload['media'] = media
        return self.call('editMessageMedia', payload)

    def delete_message(self, chat_id, message_id):
        return self.call('deleteMessage', {'chat_id': chat_id, 'message_id': message_id})

    def send_chat_action(self, chat_id, action):
        return self.call('sendChatAction', {'chat_id': chat_id, 'action': action})

    def answer_callback_query(self, callback_query_id, text=None):
        return self.call('answerCallbackQuery', {'callback_query_id': callback_query_id, 'text': text})

    def get_file_url(self, file_id):
        result = self.call('getFile', {'file_id': file_id})
        file_path = (result or {}).get('file_path')
        if not file_path:
            raise TelegramError(f"No file path for {file_id}")
        return f"{API_BASE_URL}/file/bot{self.token}/{file_path}"

    def set_webhook(self, url, secret_token=None):
        return self.call('setWebhook', {
            'url': url,
            'secret_token': secret_token or None,
            'allowed_updates': ['message', 'callback_query'],
        })
