"""
GeminiGen API client for product photo and video generation.

A generation is submitted as a multipart form and returns a job uuid; the
job history endpoint is then polled until it reports a result or a failure.
"""
import logging
import os
import time
from contextlib import ExitStack
from typing import Optional, Dict, Any, List

import requests
from django.conf import settings

from .prompts import build_base_prompt, build_image_prompt, build_video_prompt, get_api_style

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 120
VIDEO_POLL_TIMEOUT = 5 * 60

GENERATE_IMAGE_PATH = '/uapi/v1/generate_image'
GENERATE_VIDEO_PATH = '/uapi/v1/video-gen/veo'
HISTORY_PATH = '/uapi/v1/history/{uuid}'

STATUS_DONE = 2
STATUS_FAILED = 3


class GenerationError(Exception):
    """Raised when GeminiGen rejects, fails or times out a job"""


def _normalize_history(data):
    if isinstance(data, dict) and data.get('result'):
        return data['result']
    return data or {}


def _error_message(history) -> Optional[str]:
    detail = history.get('detail')
    return history.get('error_message') or (detail.get('error_message') if isinstance(detail, dict) else None)


def _generate_result(history) -> Optional[str]:
    return (
        history.get('generate_result')
        or history.get('generateResult')
        or history.get('generated_result')
        or history.get('generatedResult')
    )


def _list_field(history, *names) -> List[Dict[str, Any]]:
    for name in names:
        value = history.get(name)
        if value:
            return value if isinstance(value, list) else []
    return []


def _first_thumbnail(primary) -> Optional[str]:
    thumbnails = primary.get('thumbnails') or []
    if thumbnails and isinstance(thumbnails[0], dict):
        return thumbnails[0].get('url')
    return None


def _meta(history, primary, status) -> Dict[str, Any]:
    return {
        'status': status,
        'statusDesc': history.get('status_desc') or '',
        'queuePosition': history.get('queue_position'),
        'thumbnail': history.get('thumbnail_url'),
        'model': primary.get('model') or history.get('model_name'),
        'generatedAt': history.get('updated_at') or history.get('created_at'),
        'statusPercentage': history.get('status_percentage'),
    }


def _api_error_message(response, fallback) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}
    detail = payload.get('detail')
    return (
        (detail.get('error_message') if isinstance(detail, dict) else None)
        or payload.get('error_message')
        or payload.get('message')
        or fallback
    )


class GeminiGenClient:
    """Thin wrapper around the GeminiGen HTTP API"""

    def __init__(self, api_key=None, base_url=None, session=None):
        self.api_key = api_key if api_key is not None else settings.GEMINIGEN_API_KEY
        self.base_url = (base_url or settings.GEMINIGEN_BASE_URL).rstrip('/')
        self.model = settings.GEMINIGEN_MODEL
        self.video_model = settings.GEMINIGEN_VIDEO_MODEL
        self.video_resolution = settings.GEMINIGEN_VIDEO_RESOLUTION
        self.video_aspect_ratio = settings.GEMINIGEN_VIDEO_ASPECT_RATIO
        self.poll_interval = settings.GEMINIGEN_POLL_INTERVAL
        self.poll_limit = settings.GEMINIGEN_POLL_LIMIT
        self.session = session or requests.Session()

    def _headers(self):
        return {'x-api-key': self.api_key}

    def _require_key(self):
        if not self.api_key:
            raise GenerationError('giminigen_API_KEY is not set')

    def history_url(self, uuid):
        return f"{self.base_url}{HISTORY_PATH.format(uuid=uuid)}"

    def _submit(self, path, data, files=None, fallback='giminigen request failed'):
        try:
            response = self.session.post(
                f"{self.base_url}{path}",
                data=data,
                files=files,
                headers=self._headers(),
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise GenerationError(str(e) or fallback) from e

        if not response.ok:
            message = _api_error_message(response, fallback)
            logger.error(f"GeminiGen {path} failed with HTTP {response.status_code}: {message}")
            raise GenerationError(message)

        try:
            return response.json()
        except ValueError:
            return {}

    def _fetch_history(self, uuid):
        try:
            response = self.session.get(self.history_url(uuid), headers=self._headers(), timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            return _normalize_history(response.json())
        except (requests.RequestException, ValueError) as e:
            raise GenerationError(str(e) or 'giminigen history request failed') from e

    def generate_image(self, image_path, prompt='', options=None):
        """
        Submit a product photo and wait for the generated image.

        options may carry category, model_reference_path, model_description,
        shoe_model_description, shoe_camera_angle, shoe_lighting,
        model_persona, gender, image_style, color_hex, color_name,
        manual_color_hex, color_palette, aspect_ratio, reference_paths,
        file_urls and ref_history.
        """
        self._require_key()
        options = options or {}

        model_reference_path = options.get('model_reference_path')
        has_model_reference = bool(model_reference_path and os.path.exists(model_reference_path))

        base_prompt = build_base_prompt(options.get('category'), options, has_model_reference)
        full_prompt, aspect_ratio = build_image_prompt(base_prompt, prompt, options)
        api_style = get_api_style(options.get('image_style'))

        data = [
            ('prompt', full_prompt),
            ('model', self.model),
            ('aspect_ratio', aspect_ratio),
            ('style', api_style),
        ]
        for url in options.get('file_urls') or []:
            if url:
                data.append(('file_urls', url))
        if options.get('ref_history'):
            data.append(('ref_history', options['ref_history']))

        persona = options.get('model_persona') if isinstance(options.get('model_persona'), dict) else {}
        gender = persona.get('gender') or options.get('gender')
        if gender:
            data.append(('person_generation', gender))

        logger.info(
            f"Submitting image generation: category={options.get('category') or 'clothes'}, "
            f"aspect_ratio={aspect_ratio}, style={api_style}, prompt_length={len(full_prompt)}"
        )

        reference_paths = [model_reference_path] if has_model_reference else []
        reference_paths += [p for p in options.get('reference_paths') or [] if p and os.path.exists(p)]

        with ExitStack() as stack:
            files = [('files', (os.path.basename(image_path), stack.enter_context(open(image_path, 'rb'))))]
            for path in reference_paths:
                files.append(('files', (os.path.basename(path), stack.enter_context(open(path, 'rb')))))
            payload = self._submit(GENERATE_IMAGE_PATH, data, files)

        uuid = payload.get('uuid') if isinstance(payload, dict) else None
        if not uuid:
            raise GenerationError('giminigen did not return a job id')

        result = self.poll_for_result(uuid)
        result['prompt'] = full_prompt
        return result

    def poll_for_result(self, uuid):
        for attempt in range(self.poll_limit):
            history = self._fetch_history(uuid)
            images = _list_field(history, 'generated_image', 'generated_images')
            status = history.get('status') or 0
            error_message = _error_message(history)
            generate_result = _generate_result(history)

            if status >= STATUS_DONE and (images or generate_result):
                primary = images[0] if images and isinstance(images[0], dict) else {}
                image_url = (
                    primary.get('image_url')
                    or generate_result
                    or _first_thumbnail(primary)
                    or primary.get('file_download_url')
                    or history.get('thumbnail_url')
                )
                download_url = primary.get('file_download_url') or primary.get('image_url') or generate_result

                if not image_url and not download_url:
                    raise GenerationError('giminigen finished but did not return an image URL')

                logger.info(f"Generation {uuid} finished after {attempt + 1} polls")
                return {
                    'imageUrl': image_url or download_url,
                    'downloadUrl': download_url or image_url,
                    'historyUrl': self.history_url(uuid),
                    'meta': _meta(history, primary, status),
                }

            if status == STATUS_FAILED or status < 0 or error_message:
                raise GenerationError(error_message or 'giminigen reported a failure')

            time.sleep(self.poll_interval)

        raise GenerationError('Timed out waiting for giminigen to finish the render')

    def generate_video_from_image(self, reference_url, prompt='', options=None):
        """Animate a generated image; options may carry category and motion_style"""
        self._require_key()
        if not reference_url:
            raise GenerationError('Reference image URL is required to animate the result')
        options = options or {}

        full_prompt = build_video_prompt(prompt, options.get('category'), options.get('motion_style'))
        data = [
            ('prompt', full_prompt),
            ('model', self.video_model),
            ('resolution', self.video_resolution),
            ('aspect_ratio', self.video_aspect_ratio),
            ('file_urls', reference_url),
        ]
        logger.info(f"Submitting video generation for {reference_url}")

        payload = self._submit(GENERATE_VIDEO_PATH, data, fallback='giminigen video request failed')
        uuid = payload.get('uuid') if isinstance(payload, dict) else None
        if not uuid:
            raise GenerationError('giminigen did not return a job id for the video')

        return self.poll_for_video_result(uuid, deadline=time.monotonic() + VIDEO_POLL_TIMEOUT)

    def poll_for_video_result(self, uuid, deadline=None):
        for attempt in range(self.poll_limit):
            if deadline is not None and time.monotonic() > deadline:
                raise GenerationError('Video generation timed out after 5 minutes')

            history = self._fetch_history(uuid)
            videos = _list_field(
                history, 'generated_video', 'generated_videos', 'generated_file', 'generated_files'
            )
            status = history.get('status') or 0
            error_message = _error_message(history)
            generate_result = _generate_result(history)

            if status >= STATUS_DONE and (videos or generate_result):
                primary = videos[0] if videos and isinstance(videos[0], dict) else {}
                video_url = (
                    primary.get('video_url')
                    or generate_result
                    or primary.get('file_download_url')
                    or primary.get('url')
                    or history.get('video_url')
                )
                download_url = (
                    primary.get('file_download_url')
                    or primary.get('video_url')
                    or generate_result
                    or primary.get('url')
                )

                if not video_url and not download_url:
                    raise GenerationError('giminigen finished but did not return a video URL')

                logger.info(f"Video {uuid} finished after {attempt + 1} polls")
                return {
                    'videoUrl': video_url or download_url,
                    'downloadUrl': download_url or video_url,
                    'historyUrl': self.history_url(uuid),
                    'meta': _meta(history, primary, status),
                }

            if status == STATUS_FAILED or status < 0 or error_message:
                raise GenerationError(error_message or 'giminigen reported a failure while rendering video')

            time.sleep(self.poll_interval)

        raise GenerationError('Timed out waiting for giminigen to finish the video')
