"""
Tests for the AI studio: prompt building, the GeminiGen client, generation
limits and the studio endpoints
"""
import os
import shutil
import tempfile
import time
from unittest.mock import MagicMock, patch

import requests
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, SimpleTestCase, override_settings
from rest_framework import status

from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient, make_image_bytes
from backend.credits.models import CreditTransaction
from backend.studio import rate_limiter
from backend.studio.ad_creative import (
    build_ad_creative_prompt, get_category_defaults, get_suggested_templates, image_style_for,
    validate_ad_creative_options, COLOR_SCHEMES, DESIGN_TEMPLATES,
)
from backend.studio.geminigen import GeminiGenClient, GenerationError
from backend.studio.models import AIGeneration
from backend.studio.prompts import (
    build_base_prompt, build_color_lock_clause, build_image_prompt, build_negative_prompt,
    build_video_prompt, get_api_style, get_default_motion_preset, get_motion_presets,
    is_black_color, is_white_color, normalize_aspect_ratio, semantic_color_name,
    IMAGE_QUALITY_BOOST, IMAGE_STYLE_PRESETS, VIDEO_MOTION_PRESETS,
)
from backend.studio.uploads import UploadError, resolve_local_path, sniff_image_type
from backend.studio.views import friendly_generation_error


class ColorHelperTests(SimpleTestCase):

    def test_semantic_names(self):
        self.assertEqual(semantic_color_name('#FFFFFF'), 'pure white')
        self.assertEqual(semantic_color_name('#000000'), 'black')
        self.assertEqual(semantic_color_name('#808080'), 'gray')
        self.assertEqual(semantic_color_name('#FF0000'), 'red')
        self.assertEqual(semantic_color_name('#000080'), 'navy')
        self.assertEqual(semantic_color_name('#8B4513'), 'brown')
        self.assertEqual(semantic_color_name('not-a-color'), 'unknown')

    def test_white_and_black_detection(self):
        self.assertTrue(is_white_color('#FAFAFA'))
        self.assertFalse(is_white_color('#F5DEB3'))  # wheat is too saturated
        self.assertTrue(is_black_color('#101010'))
        self.assertFalse(is_black_color('#404040'))

    def test_color_lock_clause(self):
        self.assertEqual(build_color_lock_clause(None), '')
        white = build_color_lock_clause('#FFFFFF')
        self.assertTrue(white.startswith('[DETECTED COLOR: PURE WHITE #FFFFFF]'))
        manual = build_color_lock_clause('#FF0000', is_manual_override=True, color_palette=[{}])
        self.assertIn('[USER SPECIFIED COLOR: RED #FF0000]', manual)
        self.assertIn('covers 80% of product', manual)

    def test_white_negatives(self):
        self.assertNotIn('no yellowing', build_negative_prompt())
        self.assertTrue(build_negative_prompt(True).endswith('no tan color'))


class PromptBuilderTests(SimpleTestCase):

    def test_parts_are_ordered(self):
        prompt, ratio = build_image_prompt('BASE', 'make it pop #FF0000', {})
        self.assertTrue(prompt.startswith('[DETECTED COLOR: RED #FF0000]'))
        base = prompt.index('BASE')
        style = prompt.index(IMAGE_STYLE_PRESETS['ecommerce_clean']['prompt'])
        user = prompt.index('make it pop')
        boost = prompt.index(IMAGE_QUALITY_BOOST)
        avoid = prompt.index('Avoid: ')
        self.assertTrue(base < style < user < boost < avoid)
        self.assertTrue(prompt.endswith('FINAL REMINDER: Product color is red (#FF0000) - preserve exactly.'))
        self.assertEqual(ratio, '3:4')

    def test_white_product_reminder(self):
        prompt, _ = build_image_prompt('BASE', '', {'manual_color_hex': '#FFFFFF'})
        self.assertIn('[USER SPECIFIED COLOR: PURE WHITE #FFFFFF]', prompt)
        self.assertTrue(prompt.endswith(
            'REMINDER: This product is PURE WHITE (#FFFFFF). Output must show a WHITE product.'
        ))

    def test_ad_creative_skips_color_lock(self):
        prompt, _ = build_image_prompt('BASE', 'brand #FF0000', {'category': 'adCreative'})
        self.assertTrue(prompt.startswith('[CRITICAL: PRODUCT COLOR PRESERVATION]'))
        self.assertNotIn('DETECTED COLOR', prompt)
        self.assertIn('FINAL REMINDER: PRESERVE THE PRODUCT', prompt)

    def test_style_aspect_ratio(self):
        _, ratio = build_image_prompt('BASE', '', {'image_style': 'tiktok_dynamic'})
        self.assertEqual(ratio, '9:16')
        _, ratio = build_image_prompt('BASE', '', {'image_style': 'unknown', 'aspect_ratio': '4:5'})
        self.assertEqual(ratio, '3:4')

    def test_ad_creative_format_wins_over_style(self):
        _, ratio = build_image_prompt('BASE', '', {
            'category': 'adCreative', 'image_style': 'tiktok_dynamic', 'aspect_ratio': '16:9',
        })
        self.assertEqual(ratio, '16:9')
        _, ratio = build_image_prompt('BASE', '', {'category': 'adCreative', 'image_style': 'tiktok_dynamic'})
        self.assertEqual(ratio, '9:16')

    def test_normalize_aspect_ratio(self):
        self.assertEqual(normalize_aspect_ratio('16:9'), '16:9')
        self.assertEqual(normalize_aspect_ratio('1.91:1'), '16:9')
        self.assertEqual(normalize_aspect_ratio('3:1'), '16:9')
        self.assertEqual(normalize_aspect_ratio('1:3'), '9:16')
        self.assertEqual(normalize_aspect_ratio('5:5'), '1:1')
        self.assertEqual(normalize_aspect_ratio('garbage'), '1:1')

    def test_api_style(self):
        self.assertEqual(get_api_style('ecommerce_soft'), 'Stock Photo')
        self.assertEqual(get_api_style('luxury_dark'), 'Portrait Cinematic')
        self.assertEqual(get_api_style(None), 'Photorealistic')

    def test_category_base_prompts(self):
        shoes = build_base_prompt('shoes', {'shoe_camera_angle': 'ANGLE', 'shoe_lighting': 'LIGHT'})
        self.assertIn('these shoes worn by a real person', shoes)
        self.assertIn('natural-looking human legs', shoes)
        self.assertIn('ANGLE LIGHT', shoes)

        clothes = build_base_prompt(None, {'model_persona': {'gender': 'female', 'ethnicity': 'tunisian'}}, True)
        self.assertIn('second reference image', clothes)
        self.assertIn('The model should be: female, tunisian ethnicity.', clothes)

        bags = build_base_prompt('bags', {'model_description': 'casual look'})
        self.assertIn('Show the bag styled with a model who has: casual look.', bags)

        poster = build_base_prompt('adCreative', {'reference_paths': ['/tmp/ref.png']})
        self.assertIn('hero of a professional marketing poster', poster)
        self.assertIn('only as inspiration for layout and mood', poster)
        self.assertNotIn('human model', poster)
        self.assertNotIn('inspiration', build_base_prompt('adCreative', {}))

    def test_video_prompt(self):
        self.assertEqual(get_motion_presets('hats'), VIDEO_MOTION_PRESETS['clothes'])
        self.assertEqual(get_default_motion_preset('shoes')['id'], 'walking_feet')

        prompt = build_video_prompt('slow turn', 'bags', 'open_close')
        self.assertTrue(prompt.startswith('Transform this static fashion product image'))
        self.assertIn(VIDEO_MOTION_PRESETS['bags']['open_close']['prompt'], prompt)
        self.assertIn('slow turn', prompt)
        self.assertTrue(prompt.endswith('low quality compression.'))


def _response(payload, ok=True, status_code=200):
    response = MagicMock(ok=ok, status_code=status_code)
    response.json.return_value = payload
    return response


@override_settings(GEMINIGEN_API_KEY='test-key', GEMINIGEN_POLL_INTERVAL=0, GEMINIGEN_POLL_LIMIT=3)
class GeminiGenClientTests(SimpleTestCase):

    def setUp(self):
        handle, self.image_path = tempfile.mkstemp(suffix='.png')
        with os.fdopen(handle, 'wb') as f:
            f.write(make_image_bytes())
        self.session = MagicMock()

    def tearDown(self):
        os.remove(self.image_path)

    def test_generate_image_polls_until_done(self):
        self.session.post.return_value = _response({'uuid': 'job-1'})
        self.session.get.side_effect = [
            _response({'result': {'status': 1}}),
            _response({'result': {
                'status': 2,
                'status_desc': 'done',
                'generated_image': [{'image_url': 'https://cdn/img.png', 'file_download_url': 'https://cdn/dl.png'}],
            }}),
        ]
        client = GeminiGenClient(session=self.session)
        result = client.generate_image(self.image_path, 'red dress', {'image_style': 'luxury_dark', 'gender': 'female'})

        self.assertEqual(result['imageUrl'], 'https://cdn/img.png')
        self.assertEqual(result['downloadUrl'], 'https://cdn/dl.png')
        self.assertEqual(result['historyUrl'], 'https://api.geminigen.ai/uapi/v1/history/job-1')
        self.assertEqual(result['meta']['statusDesc'], 'done')

        args, kwargs = self.session.post.call_args
        self.assertTrue(args[0].endswith('/uapi/v1/generate_image'))
        self.assertEqual(kwargs['headers'], {'x-api-key': 'test-key'})
        fields = dict(kwargs['data'])
        self.assertEqual(fields['style'], 'Portrait Cinematic')
        self.assertEqual(fields['person_generation'], 'female')
        self.assertEqual(fields['model'], 'imagen-pro')

    def test_reference_images_are_uploaded(self):
        self.session.post.return_value = _response({'uuid': 'job-2'})
        self.session.get.return_value = _response({'status': 2, 'generate_result': 'https://cdn/poster.png'})
        client = GeminiGenClient(session=self.session)
        client.generate_image(self.image_path, 'poster', {
            'category': 'adCreative',
            'reference_paths': [self.image_path, '/no/such/file.png'],
        })

        files = self.session.post.call_args[1]['files']
        self.assertEqual(len(files), 2)
        self.assertTrue(all(name == 'files' for name, _ in files))

    def test_generate_result_fallback(self):
        self.session.post.return_value = _response({'uuid': 'job-2'})
        self.session.get.return_value = _response({'status': 2, 'generate_result': 'https://cdn/out.png'})
        result = GeminiGenClient(session=self.session).generate_image(self.image_path)
        self.assertEqual(result['imageUrl'], 'https://cdn/out.png')
        self.assertEqual(result['downloadUrl'], 'https://cdn/out.png')

    def test_missing_job_id(self):
        self.session.post.return_value = _response({})
        with self.assertRaisesMessage(GenerationError, 'giminigen did not return a job id'):
            GeminiGenClient(session=self.session).generate_image(self.image_path)

    def test_provider_failure(self):
        self.session.post.return_value = _response({'uuid': 'job-3'})
        self.session.get.return_value = _response({'status': 3})
        with self.assertRaisesMessage(GenerationError, 'giminigen reported a failure'):
            GeminiGenClient(session=self.session).generate_image(self.image_path)

    def test_nested_error_message(self):
        self.session.post.return_value = _response({'uuid': 'job-4'})
        self.session.get.return_value = _response({'status': 1, 'detail': {'error_message': 'NSFW content'}})
        with self.assertRaisesMessage(GenerationError, 'NSFW content'):
            GeminiGenClient(session=self.session).generate_image(self.image_path)

    def test_http_error_surfaces_message(self):
        self.session.post.return_value = _response({'detail': {'error_message': 'Quota exceeded'}}, ok=False, status_code=429)
        with self.assertRaisesMessage(GenerationError, 'Quota exceeded'):
            GeminiGenClient(session=self.session).generate_image(self.image_path)

    def test_poll_timeout(self):
        self.session.get.return_value = _response({'status': 1})
        with self.assertRaisesMessage(GenerationError, 'Timed out waiting for giminigen to finish the render'):
            GeminiGenClient(session=self.session).poll_for_result('job-5')
        self.assertEqual(self.session.get.call_count, 3)

    @override_settings(GEMINIGEN_API_KEY='')
    def test_missing_api_key(self):
        with self.assertRaisesMessage(GenerationError, 'giminigen_API_KEY is not set'):
            GeminiGenClient(session=self.session).generate_image(self.image_path)

    def test_video_generation(self):
        self.session.post.return_value = _response({'uuid': 'vid-1'})
        self.session.get.return_value = _response({
            'status': 2, 'generated_video': [{'video_url': 'https://cdn/v.mp4'}]
        })
        result = GeminiGenClient(session=self.session).generate_video_from_image('https://cdn/img.png', 'walk')
        self.assertEqual(result['videoUrl'], 'https://cdn/v.mp4')
        args, kwargs = self.session.post.call_args
        self.assertTrue(args[0].endswith('/uapi/v1/video-gen/veo'))
        self.assertIn(('file_urls', 'https://cdn/img.png'), kwargs['data'])

    def test_video_requires_reference(self):
        with self.assertRaisesMessage(GenerationError, 'Reference image URL is required to animate the result'):
            GeminiGenClient(session=self.session).generate_video_from_image('', 'walk')

    def test_video_deadline(self):
        client = GeminiGenClient(session=self.session)
        with self.assertRaisesMessage(GenerationError, 'Video generation timed out after 5 minutes'):
            client.poll_for_video_result('vid-2', deadline=time.monotonic() - 1)
        self.session.get.assert_not_called()


@override_settings(STUDIO_RATE_LIMITS={'per_hour': 2, 'per_day': 3, 'cooldown_seconds': 30})
class RateLimiterTests(SimpleTestCase):

    def setUp(self):
        cache.clear()

    def test_cooldown_then_allowed(self):
        rate_limiter.record_generation('u1', now=1000)
        result = rate_limiter.can_generate('u1', now=1010)
        self.assertEqual(result, {'allowed': False, 'reason': 'cooldown', 'retryAfter': 20})
        self.assertTrue(rate_limiter.can_generate('u1', now=1031)['allowed'])

    def test_hourly_limit(self):
        rate_limiter.record_generation('u2', now=1000)
        rate_limiter.record_generation('u2', now=1100)
        result = rate_limiter.can_generate('u2', now=1200)
        self.assertEqual(result['reason'], 'hourly_limit')
        self.assertEqual(result['current'], 2)
        self.assertEqual(result['retryAfter'], 57)

    def test_daily_limit(self):
        for ts in (1000, 1100, 6000):
            rate_limiter.record_generation('u3', now=ts)
        result = rate_limiter.can_generate('u3', now=9000)
        self.assertEqual(result['reason'], 'daily_limit')
        self.assertEqual(result['retryAfter'], 'tomorrow')

    def test_usage_and_reset(self):
        rate_limiter.record_generation('u4', now=1000)
        usage = rate_limiter.get_usage('u4', now=1001)
        self.assertEqual(usage['hourly'], {'used': 1, 'limit': 2, 'remaining': 1})
        self.assertIsNotNone(usage['lastGeneration'])

        rate_limiter.reset_user('u4')
        self.assertIsNone(rate_limiter.get_usage('u4')['lastGeneration'])


class UploadHelperTests(SimpleTestCase):

    def test_sniff_image_type(self):
        self.assertEqual(sniff_image_type(make_image_bytes('JPEG')[:12]), 'image/jpeg')
        self.assertEqual(sniff_image_type(make_image_bytes('PNG')[:12]), 'image/png')
        self.assertEqual(sniff_image_type(b'RIFF\x00\x00\x00\x00WEBP'), 'image/webp')
        self.assertIsNone(sniff_image_type(b'GIF89a'))

    def test_traversal_rejected(self):
        with self.assertRaises(UploadError):
            resolve_local_path('/media/generations/../../etc/passwd')

    def test_friendly_errors(self):
        self.assertIn('rate limit', friendly_generation_error('Upstream rate limit hit'))
        self.assertIn('took too long', friendly_generation_error('Timed out waiting for giminigen to finish the render'))
        self.assertIn('Invalid input', friendly_generation_error('Invalid prompt'))
        self.assertEqual(friendly_generation_error('Not enough credit'), 'Not enough credit')
        self.assertEqual(friendly_generation_error('boom'), 'Failed to generate image. Please try again.')


GENERATED = {
    'imageUrl': 'https://cdn.example.com/result.png',
    'downloadUrl': 'https://cdn.example.com/result-dl.png',
    'historyUrl': 'https://api.geminigen.ai/uapi/v1/history/job',
    'meta': {'status': 2},
}


class AdCreativeTests(SimpleTestCase):

    def test_valid_options(self):
        self.assertEqual(validate_ad_creative_options({
            'product_category': 'fashion',
            'output_format': 'instagram_story',
            'design_template': 'luxury_dark',
            'decorative_elements': ['sparkles', 'none'],
            'custom_colors': {'primary': '#112233'},
            'text_content': {'headline': 'Summer sale'},
        }), [])

    def test_invalid_options(self):
        errors = validate_ad_creative_options({
            'product_category': 'spaceships',
            'output_format': None,
            'composition_style': ['subject_left'],
            'decorative_elements': ['sparkles', 'lasers'],
            'custom_colors': {'accent': 'red'},
            'text_content': {'cta': 'x' * 201},
            'custom_instructions': 'y' * 1001,
        })
        self.assertIn('Output format is required', errors)
        self.assertIn('Invalid product category: spaceships', errors)
        self.assertIn("Invalid composition style: ['subject_left']", errors)
        self.assertIn('Invalid decorative element: lasers', errors)
        self.assertIn('Invalid custom color format for accent: red', errors)
        self.assertIn('Cta must be 200 characters or less', errors)
        self.assertIn('Custom instructions must be 1000 characters or less', errors)

    def test_wrong_container_types(self):
        errors = validate_ad_creative_options({
            'product_category': 'other',
            'output_format': 'instagram_feed',
            'decorative_elements': 'sparkles',
            'custom_colors': '#FFFFFF',
            'text_content': 'hello',
        })
        self.assertEqual(errors, [
            'Decorative elements must be a list',
            'Custom colors must be an object',
            'Text content must be an object',
        ])

    def test_prompt_sections_are_ordered(self):
        result = build_ad_creative_prompt(
            product_category='fashion', output_format='instagram_story', design_template='luxury_dark',
            decorative_elements=['sparkles', 'none'], text_content={'headline': 'Summer sale'},
            target_audience='students', custom_instructions='gold accents',
        )
        prompt = result['prompt']
        headers = [
            'DESIGN STYLE:', 'LAYOUT & COMPOSITION:', 'COLOR PALETTE:', 'DECORATIVE ELEMENTS:',
            'TYPOGRAPHY STYLE:', 'TEXT PLACEMENT ZONES', 'PRODUCT CONTEXT:', 'TARGET AUDIENCE:',
            'ADDITIONAL REQUIREMENTS:', 'OUTPUT SPECIFICATIONS:', 'STRICTLY AVOID:',
        ]
        positions = [prompt.index(header) for header in headers]
        self.assertEqual(positions, sorted(positions))
        self.assertTrue(prompt.startswith('Create a stunning professional marketing poster design.'))
        self.assertIn('"Summer sale"', prompt)
        self.assertIn('This is a Fashion & Apparel product.', prompt)
        self.assertIn('Dimensions: 1080x1920px', prompt)

        self.assertEqual(result['format'], 'instagram_story')
        self.assertEqual(result['aspect_ratio'], '9:16')
        self.assertEqual(result['dimensions'], {'width': 1080, 'height': 1920})
        self.assertEqual(result['metadata']['decorativeElements'], ['sparkles'])
        self.assertEqual(result['metadata']['textContent'], {'headline': 'Summer sale'})

    def test_custom_colors_replace_the_scheme(self):
        prompt = build_ad_creative_prompt(
            color_scheme='royal_blue',
            custom_colors={'primary': '#123456', 'secondary': '#FFFFFF', 'accent': '#000000'},
        )['prompt']
        self.assertIn('PRIMARY COLOR: #123456', prompt)
        self.assertNotIn(COLOR_SCHEMES['royal_blue']['colors']['primary'], prompt)

        no_palette = build_ad_creative_prompt(color_scheme='custom')['prompt']
        self.assertNotIn('COLOR PALETTE:', no_palette)

    def test_defaults_and_unknown_format(self):
        result = build_ad_creative_prompt(output_format='billboard', decorative_elements=['none'])
        self.assertIn('TEXT ZONES:', result['prompt'])
        self.assertNotIn('DECORATIVE ELEMENTS:', result['prompt'])
        self.assertNotIn('OUTPUT SPECIFICATIONS:', result['prompt'])
        self.assertEqual(result['aspect_ratio'], '1:1')
        self.assertEqual(result['dimensions'], {'width': 1080, 'height': 1080})
        self.assertIsNone(result['metadata']['textContent'])

    def test_suggested_templates(self):
        suggested = get_suggested_templates('fashion')
        self.assertEqual([t['id'] for t in suggested], ['minimal_elegant', 'modern_gradient', 'luxury_dark'])
        self.assertEqual(get_suggested_templates('spaceships'), [])

    def test_category_defaults(self):
        defaults = get_category_defaults('fashion')
        self.assertEqual(defaults['designTemplate'], 'minimal_elegant')
        self.assertEqual(defaults['colorScheme'], 'custom')
        self.assertEqual(defaults['customColors'], DESIGN_TEMPLATES['minimal_elegant']['color_suggestion'])
        self.assertEqual(defaults['decorativeElements'], ['none'])
        self.assertEqual(defaults['compositionStyle'], 'subject_center')

        self.assertEqual(get_category_defaults('spaceships'), {
            'designTemplate': 'modern_gradient',
            'colorScheme': 'royal_blue',
            'decorativeElements': ['gradient_waves'],
        })

    def test_image_style_for_template(self):
        self.assertEqual(image_style_for('luxury_dark'), 'luxury_dark')
        self.assertEqual(image_style_for('unknown'), 'ecommerce_clean')


class StudioEndpointTests(TestCase):

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _upload(self, content=None, content_type='image/png'):
        return SimpleUploadedFile('product.png', content or make_image_bytes(), content_type=content_type)

    def test_health_is_public(self):
        response = AuthenticatedAPIClient().get('/api/v1/studio/health/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ok')

    def test_config_lists_presets(self):
        response = AuthenticatedAPIClient().get('/api/v1/studio/config/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['imageStyles']), 12)
        model = response.data['models'][0]
        self.assertTrue(model['previewUrl'].startswith('/media/studio/assets/models/'))
        self.assertNotIn('file', model)

    def test_credits(self):
        TestDataFactory.create_credit(self.user, balance=4)
        response = self.client.get('/api/v1/studio/credits/')
        self.assertEqual(response.data, {'balance': 4, 'costs': {'photo': 1, 'video': 3}})

    def test_generate_requires_image(self):
        response = self.client.post('/api/v1/studio/generate/', {'prompt': 'x'}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'No image file uploaded')

    def test_generate_rejects_fake_image(self):
        fake = self._upload(content=b'not an image at all')
        response = self.client.post('/api/v1/studio/generate/', {'image': fake}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_generate_insufficient_credits(self):
        TestDataFactory.create_credit(self.user, balance=0)
        response = self.client.post('/api/v1/studio/generate/', {'image': self._upload()}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_402_PAYMENT_REQUIRED)
        self.assertEqual(response.data['code'], 'INSUFFICIENT_CREDITS')
        self.assertEqual(response.data['required'], 1)

    @patch('backend.studio.views.download_and_save_image', return_value='/media/generations/gen-1-abc.png')
    @patch('backend.studio.views.GeminiGenClient')
    def test_generate_success(self, client_class, _download):
        client_class.return_value.generate_image.return_value = dict(GENERATED)
        TestDataFactory.create_credit(self.user, balance=3)
        shop = TestDataFactory.create_shop(owner=self.user)
        product = TestDataFactory.create_product(shop)

        response = self.client.post('/api/v1/studio/generate/', {
            'image': self._upload(),
            'prompt': 'summer look',
            'category': 'clothes',
            'modelId': 'asma',
            'modelPersona': '{not json',
            'productId': str(product.id),
        }, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['imageUrl'], '/media/generations/gen-1-abc.png')
        self.assertEqual(response.data['credits'], {'deducted': 1, 'remaining': 2})

        options = client_class.return_value.generate_image.call_args[0][2]
        self.assertIn('Tunisian woman named Asma', options['model_description'])
        self.assertIsNone(options['model_persona'])

        generation = AIGeneration.objects.get(user=self.user)
        self.assertEqual(generation.product, product)
        self.assertEqual(generation.metadata, {'modelId': 'asma', 'imageStyle': 'ecommerce_clean'})
        self.assertTrue(CreditTransaction.objects.filter(user=self.user, type='photo_generation').exists())

        # Cooldown applies to the next request
        second = self.client.post('/api/v1/studio/generate/', {'image': self._upload()}, format='multipart')
        self.assertEqual(second.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(second.data['reason'], 'cooldown')

    @patch('backend.studio.views.GeminiGenClient')
    def test_generate_failure_keeps_credits(self, client_class):
        client_class.return_value.generate_image.side_effect = GenerationError(
            'Timed out waiting for giminigen to finish the render'
        )
        TestDataFactory.create_credit(self.user, balance=3)

        response = self.client.post(
            '/api/v1/studio/generate/', {'image': self._upload()}, format='multipart',
            HTTP_X_REQUEST_ID='req-42'
        )
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['code'], 'GENERATION_FAILED')
        self.assertEqual(response.data['requestId'], 'req-42')
        self.assertIn('took too long', response.data['error'])
        self.user.credit.refresh_from_db()
        self.assertEqual(self.user.credit.balance, 3)

    def test_generate_video_requires_url(self):
        response = self.client.post('/api/v1/studio/generate-video/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Image URL is required')

    def test_generate_video_insufficient_credits(self):
        TestDataFactory.create_credit(self.user, balance=2)
        response = self.client.post('/api/v1/studio/generate-video/', {'imageUrl': 'https://cdn/x.png'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_402_PAYMENT_REQUIRED)
        self.assertEqual(response.data['error'], 'Insufficient credits for video generation')
        self.assertEqual(response.data['required'], 3)

    @patch('backend.studio.views.GeminiGenClient')
    def test_generate_video_charges_user(self, client_class):
        client_class.return_value.generate_video_from_image.return_value = {
            'videoUrl': 'https://cdn/v.mp4', 'downloadUrl': 'https://cdn/v.mp4', 'meta': {},
        }
        TestDataFactory.create_credit(self.user, balance=5)
        response = self.client.post(
            '/api/v1/studio/generate-video/',
            {'imageUrl': 'https://cdn/x.png', 'category': 'shoes', 'motionStyle': 'shoe_rotation'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['credits'], {'deducted': 3, 'remaining': 2})
        client_class.return_value.generate_video_from_image.assert_called_once_with(
            'https://cdn/x.png', 'Fashion model moving naturally',
            {'category': 'shoes', 'motion_style': 'shoe_rotation'}
        )

    @patch('backend.studio.views.GeminiGenClient')
    def test_generate_video_failure(self, client_class):
        client_class.return_value.generate_video_from_image.side_effect = GenerationError('giminigen reported a failure')
        response = AuthenticatedAPIClient().post(
            '/api/v1/studio/generate-video/', {'imageUrl': 'https://cdn/x.png'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'giminigen reported a failure')

    def test_config_lists_ad_creative_presets(self):
        response = AuthenticatedAPIClient().get('/api/v1/studio/config/')
        presets = response.data['adCreativePresets']
        self.assertEqual(len(presets['designTemplates']), 8)
        self.assertEqual(len(presets['outputFormats']), 8)
        self.assertIn('fashion', [c['id'] for c in presets['productCategories']])

    def test_ad_creative_requires_product_image(self):
        response = self.client.post('/api/v1/studio/generate-ad-creative/', {}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Product image is required')

    @patch('backend.studio.views.GeminiGenClient')
    def test_ad_creative_rejects_invalid_options(self, client_class):
        TestDataFactory.create_credit(self.user, balance=3)
        response = self.client.post('/api/v1/studio/generate-ad-creative/', {
            'productImage': self._upload(),
            'outputFormat': 'billboard',
            'decorativeElements': 'sparkles,lasers',
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid options provided')
        self.assertIn('Invalid output format: billboard', response.data['details'])
        self.assertIn('Invalid decorative element: lasers', response.data['details'])
        client_class.assert_not_called()

    def test_ad_creative_insufficient_credits(self):
        TestDataFactory.create_credit(self.user, balance=0)
        response = self.client.post(
            '/api/v1/studio/generate-ad-creative/', {'productImage': self._upload()}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_402_PAYMENT_REQUIRED)
        self.assertEqual(response.data['code'], 'INSUFFICIENT_CREDITS')
        self.assertEqual(response.data['message'], 'You need at least 1 credit to generate an ad creative')

    @patch('backend.studio.views.download_and_save_image', return_value='/media/generations/gen-2-abc.png')
    @patch('backend.studio.views.GeminiGenClient')
    def test_ad_creative_success(self, client_class, _download):
        client_class.return_value.generate_image.return_value = dict(GENERATED)
        TestDataFactory.create_credit(self.user, balance=3)

        response = self.client.post('/api/v1/studio/generate-ad-creative/', {
            'productImage': self._upload(),
            'referenceImage': SimpleUploadedFile('ref.png', make_image_bytes(), content_type='image/png'),
            'productCategory': 'fashion',
            'outputFormat': 'instagram_story',
            'designTemplate': 'luxury_dark',
            'decorativeElements': '["sparkles"]',
            'textContent': '{"headline": "Summer sale"}',
        }, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['imageUrl'], '/media/generations/gen-2-abc.png')
        self.assertEqual(response.data['aspectRatio'], '9:16')
        self.assertEqual(response.data['dimensions'], {'width': 1080, 'height': 1920})
        self.assertEqual(response.data['credits'], {'deducted': 1, 'remaining': 2})

        image_path, prompt, options = client_class.return_value.generate_image.call_args[0]
        self.assertIn('"Summer sale"', prompt)
        self.assertEqual(options['category'], 'adCreative')
        self.assertEqual(options['aspect_ratio'], '9:16')
        self.assertEqual(options['image_style'], 'luxury_dark')
        self.assertEqual(len(options['reference_paths']), 1)
        self.assertFalse(os.path.exists(image_path))
        self.assertFalse(os.path.exists(options['reference_paths'][0]))

        generation = AIGeneration.objects.get(user=self.user)
        self.assertEqual(generation.category, 'adCreative')
        self.assertEqual(generation.metadata['designTemplate'], 'luxury_dark')
        self.assertEqual(generation.metadata['dimensions'], {'width': 1080, 'height': 1920})
        transaction = CreditTransaction.objects.get(user=self.user, type='photo_generation')
        self.assertEqual(transaction.metadata['category'], 'adCreative')

    @patch('backend.studio.views.GeminiGenClient')
    def test_ad_creative_failure_keeps_credits(self, client_class):
        client_class.return_value.generate_image.side_effect = GenerationError('giminigen reported a failure')
        TestDataFactory.create_credit(self.user, balance=3)

        response = self.client.post(
            '/api/v1/studio/generate-ad-creative/', {'productImage': self._upload()}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['code'], 'AD_CREATIVE_GENERATION_FAILED')
        self.assertEqual(response.data['error'], 'Failed to generate ad creative. Please try again.')
        self.user.credit.refresh_from_db()
        self.assertEqual(self.user.credit.balance, 3)
        self.assertFalse(AIGeneration.objects.filter(user=self.user).exists())


class DownloadProxyTests(TestCase):

    def setUp(self):
        cache.clear()
        self.media_root = tempfile.mkdtemp()
        self.override = override_settings(MEDIA_ROOT=self.media_root)
        self.override.enable()
        self.client = AuthenticatedAPIClient()

    def tearDown(self):
        self.override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def test_url_required(self):
        response = self.client.get('/api/v1/studio/download-image/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'URL parameter is required')

    def test_local_file(self):
        os.makedirs(os.path.join(self.media_root, 'generations'))
        with open(os.path.join(self.media_root, 'generations', 'gen-1.jpg'), 'wb') as f:
            f.write(make_image_bytes('JPEG'))

        response = self.client.get('/api/v1/studio/download-image/', {
            'url': '/media/generations/gen-1.jpg', 'filename': 'my photo!'
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'image/jpeg')
        self.assertEqual(response['Content-Disposition'], 'attachment; filename="my_photo_.jpg"')
        self.assertEqual(response['Cache-Control'], 'no-cache')

    def test_missing_local_file(self):
        response = self.client.get('/api/v1/studio/download-image/', {'url': '/media/generations/nope.png'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'File not found')

    def test_traversal_rejected(self):
        response = self.client.get('/api/v1/studio/download-image/', {'url': '/uploads/../../secret.png'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_url(self):
        response = self.client.get('/api/v1/studio/download-image/', {'url': 'ftp://host/file.png'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid URL')

    @patch('backend.studio.uploads.requests.get')
    def test_remote_file(self, mock_get):
        mock_get.return_value = MagicMock(content=b'webpdata', headers={'Content-Type': 'image/webp'})
        response = self.client.get('/api/v1/studio/download-image/', {'url': 'https://cdn/x'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Disposition'], 'attachment; filename="generated-image.webp"')
        self.assertEqual(response.content, b'webpdata')

    @patch('backend.studio.uploads.requests.get', side_effect=requests.ConnectionError('down'))
    def test_remote_failure(self, _get):
        response = self.client.get('/api/v1/studio/download-image/', {'url': 'https://cdn/x'})
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Failed to download image')


class AIGenerationAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_me_lists_own_generations(self):
        shop = TestDataFactory.create_shop(owner=self.user)
        product = TestDataFactory.create_product(shop, name='Linen Shirt')
        AIGeneration.objects.create(user=self.user, image_url='/media/generations/a.png', product=product)
        AIGeneration.objects.create(user=self.other, image_url='/media/generations/b.png')

        response = self.client.get('/api/v1/ai-generations/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 1)
        self.assertEqual(response.data['data'][0]['product'], {'id': product.id, 'name': 'Linen Shirt'})

    def test_local_media_path_passes_model_validation(self):
        generation = AIGeneration(
            user=self.user,
            image_url='/media/generations/2024/05/a1b2c3.png',
            download_url='/media/generations/2024/05/a1b2c3.png',
        )
        generation.full_clean()
        generation.save()

        response = self.client.get(f'/api/v1/ai-generations/{generation.id}/')
        self.assertEqual(response.data['data']['imageUrl'], '/media/generations/2024/05/a1b2c3.png')

    def test_create_assigns_user(self):
        response = self.client.post('/api/v1/ai-generations/', {
            'imageUrl': 'https://cdn/x.png', 'category': 'shoes', 'prompt': 'p'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(AIGeneration.objects.get().user, self.user)

    def test_detail_is_owner_only(self):
        mine = AIGeneration.objects.create(user=self.user, image_url='https://cdn/1.png')
        theirs = AIGeneration.objects.create(user=self.other, image_url='https://cdn/2.png')

        self.assertEqual(self.client.get(f'/api/v1/ai-generations/{mine.id}/').status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(f'/api/v1/ai-generations/{theirs.id}/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.delete(f'/api/v1/ai-generations/{theirs.id}/').status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.delete(f'/api/v1/ai-generations/{mine.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(AIGeneration.objects.filter(pk=mine.pk).exists())
