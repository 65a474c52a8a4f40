import json
import logging
import re
import time

import requests
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from backend.catalog.models import Product
from backend.credits.services import (
    CREDIT_COSTS, CreditError, check_credits, deduct_for_generation, get_or_create_credit
)
from . import rate_limiter
from .ad_creative import (
    DEFAULT_COLOR_SCHEME, DEFAULT_COMPOSITION_STYLE, DEFAULT_DESIGN_TEMPLATE, DEFAULT_OUTPUT_FORMAT,
    DEFAULT_PRODUCT_CATEGORY, DEFAULT_TYPOGRAPHY_STYLE, build_ad_creative_prompt, get_ad_creative_presets,
    image_style_for, validate_ad_creative_options
)
from .geminigen import GeminiGenClient, GenerationError
from .models import AIGeneration
from .presets import get_studio_config, reference_for
from .prompts import AD_CREATIVE_CATEGORY, DEFAULT_IMAGE_STYLE, IMAGE_STYLE_PRESETS, VIDEO_MOTION_PRESETS
from .serializers import AIGenerationSerializer
from .throttles import ApiRateThrottle, GenerateRateThrottle
from .uploads import (
    UploadError, download_and_save_image, extension_for_content_type, fetch_image,
    remove_temp_file, save_upload, validate_image_file
)

logger = logging.getLogger('backend.studio')

STARTED_AT = time.monotonic()
HISTORY_LIMIT = 100
DEFAULT_VIDEO_PROMPT = 'Fashion model moving naturally'
UNSAFE_FILENAME_CHARS = re.compile(r'[^a-zA-Z0-9-_]')


def _rate_limit_key(user):
    return f"user:{user.id}"


def _parse_json_field(raw, name):
    """Multipart forms carry nested values as JSON strings; bad JSON is dropped"""
    if not raw:
        return None
    if isinstance(raw, (dict, list)):
        return raw
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring malformed {name}: {raw!r}")
        return None


def friendly_generation_error(message):
    text = message or ''
    lowered = text.lower()
    if 'rate limit' in lowered:
        return 'AI service rate limit reached. Please wait a minute and try again.'
    if 'timeout' in lowered or 'timed out' in lowered or 'etimedout' in lowered:
        return 'Generation took too long. Please try with a simpler prompt or smaller image.'
    if 'invalid' in lowered:
        return 'Invalid input provided. Please check your image and settings.'
    if 'credit' in lowered:
        return text
    return 'Failed to generate image. Please try again.'


@api_view(['GET'])
@permission_classes([AllowAny])
def health(request):
    return Response({
        'status': 'ok',
        'uptime': round(time.monotonic() - STARTED_AT, 3),
        'timestamp': timezone.now().isoformat(),
    })


@api_view(['GET'])
@permission_classes([AllowAny])
@throttle_classes([ApiRateThrottle])
def studio_config(request):
    """Presets the studio UI offers"""
    config = get_studio_config()
    config['imageStyles'] = list(IMAGE_STYLE_PRESETS.values())
    config['adCreativePresets'] = get_ad_creative_presets()
    config['videoMotionPresets'] = {
        category: list(presets.values()) for category, presets in VIDEO_MOTION_PRESETS.items()
    }
    return Response(config)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
@throttle_classes([ApiRateThrottle])
def studio_credits(request):
    credit = get_or_create_credit(request.user)
    return Response({'balance': credit.balance, 'costs': CREDIT_COSTS})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([ApiRateThrottle, GenerateRateThrottle])
def generate(request):
    """
    Generate a product photo from an uploaded image.

    The upload is validated, the caller's limits and credits checked, and
    credits are only deducted once the provider returned an image.
    """
    image = request.FILES.get('image')
    model_reference = request.FILES.get('modelReference')
    if image is None:
        return Response({'error': 'No image file uploaded'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        validate_image_file(image)
        if model_reference is not None:
            validate_image_file(model_reference)
    except UploadError as e:
        logger.warning(f"Rejected upload from user {request.user.id}: {e}")
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    limit_key = _rate_limit_key(request.user)
    limit = rate_limiter.can_generate(limit_key)
    if not limit['allowed']:
        logger.warning(f"Generation limit hit for user {request.user.id}: {limit['reason']}")
        return Response(
            {'error': 'Generation limit reached', **{k: v for k, v in limit.items() if k != 'allowed'}},
            status=status.HTTP_429_TOO_MANY_REQUESTS
        )

    credit_check = check_credits(request.user, 'photo')
    if not credit_check.allowed:
        return Response({
            'error': 'Insufficient credits',
            'code': 'INSUFFICIENT_CREDITS',
            'balance': credit_check.balance,
            'required': credit_check.cost,
        }, status=status.HTTP_402_PAYMENT_REQUIRED)

    data = request.data
    prompt = data.get('prompt') or ''
    category = data.get('category') or None
    model_id = data.get('modelId') or None
    shoe_model_id = data.get('shoeModelId') or None
    image_style = data.get('imageStyle') or DEFAULT_IMAGE_STYLE
    persona = _parse_json_field(data.get('modelPersona'), 'modelPersona')
    palette = _parse_json_field(data.get('colorPalette'), 'colorPalette')

    image_path = None
    reference_path = None
    try:
        image_path = save_upload(image)
        if model_reference is not None:
            reference_path = save_upload(model_reference)

        model_description = ''
        shoe_model_description = ''
        resolved_reference = reference_path
        if category == 'shoes' and shoe_model_id:
            shoe_model_description, preset_path = reference_for(shoe_model_id, 'shoes')
            shoe_model_description = shoe_model_description or ''
            resolved_reference = resolved_reference or preset_path
        elif model_id:
            model_description, preset_path = reference_for(model_id)
            model_description = model_description or ''
            resolved_reference = resolved_reference or preset_path

        persona_gender = persona.get('gender') if isinstance(persona, dict) else None
        options = {
            'category': category,
            'gender': data.get('gender') or persona_gender,
            'model_persona': persona if isinstance(persona, dict) else None,
            'model_description': model_description,
            'shoe_model_description': shoe_model_description,
            'model_reference_path': resolved_reference,
            'shoe_camera_angle': data.get('shoeCameraAngle') or None,
            'shoe_lighting': data.get('shoeLighting') or None,
            'image_style': image_style,
            'color_hex': data.get('colorHex') or None,
            'color_name': data.get('colorName') or None,
            'manual_color_hex': data.get('manualColorHex') or None,
            'color_palette': palette if isinstance(palette, list) else None,
        }
        logger.info(
            f"Generation requested by user {request.user.id}: category={category}, "
            f"model={model_id or shoe_model_id}, style={image_style}"
        )

        result = GeminiGenClient().generate_image(image_path, prompt, options)

        image_url = result['imageUrl']
        download_url = result['downloadUrl']
        local_path = download_and_save_image(image_url)
        if local_path:
            image_url = download_url = local_path

        credits = None
        try:
            credit = deduct_for_generation(
                request.user, 'photo', metadata={'category': category, 'generatedImageUrl': result['imageUrl']}
            )
            credits = {'deducted': CREDIT_COSTS['photo'], 'remaining': credit.balance}
        except CreditError as e:
            logger.warning(f"Could not charge user {request.user.id} for generation: {e}")

        rate_limiter.record_generation(limit_key)

        product_id = str(data.get('productId') or '')
        AIGeneration.objects.create(
            user=request.user,
            image_url=image_url,
            download_url=download_url or '',
            category=category or 'clothes',
            prompt=prompt,
            product=Product.objects.filter(pk=int(product_id)).first() if product_id.isdigit() else None,
            metadata={'modelId': model_id, 'imageStyle': image_style},
        )

        return Response({
            'imageUrl': image_url,
            'downloadUrl': download_url,
            'meta': result.get('meta'),
            'prompt': prompt,
            'category': category,
            'modelId': model_id,
            'credits': credits,
        })
    except (GenerationError, requests.RequestException, OSError) as e:
        request_id = request.headers.get('X-Request-ID') or f"gen-{int(time.time() * 1000)}"
        logger.error(
            f"Generation {request_id} failed for user {request.user.id} "
            f"(category={category}, model={model_id}, style={image_style}): {e}",
            exc_info=True
        )
        return Response({
            'error': friendly_generation_error(str(e)),
            'code': 'GENERATION_FAILED',
            'requestId': request_id,
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    finally:
        remove_temp_file(image_path)
        remove_temp_file(reference_path)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([ApiRateThrottle, GenerateRateThrottle])
def generate_video(request):
    """Animate a generated image; signed-in callers pay the video cost"""
    image_url = request.data.get('imageUrl')
    if not image_url:
        return Response({'error': 'Image URL is required'}, status=status.HTTP_400_BAD_REQUEST)

    user = request.user if request.user and request.user.is_authenticated else None
    if user is not None:
        credit_check = check_credits(user, 'video')
        if not credit_check.allowed:
            return Response({
                'error': 'Insufficient credits for video generation',
                'code': 'INSUFFICIENT_CREDITS',
                'balance': credit_check.balance,
                'required': credit_check.cost,
            }, status=status.HTTP_402_PAYMENT_REQUIRED)

    category = request.data.get('category') or 'clothes'
    try:
        result = GeminiGenClient().generate_video_from_image(
            image_url,
            request.data.get('prompt') or DEFAULT_VIDEO_PROMPT,
            {'category': category, 'motion_style': request.data.get('motionStyle') or None},
        )
    except (GenerationError, requests.RequestException) as e:
        logger.error(f"Video generation failed for {image_url}: {e}", exc_info=True)
        return Response({'error': str(e) or 'Failed to generate video'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    credits = None
    if user is not None:
        try:
            credit = deduct_for_generation(
                user, 'video', metadata={'category': category, 'generatedVideoUrl': result['videoUrl']}
            )
            credits = {'deducted': CREDIT_COSTS['video'], 'remaining': credit.balance}
        except CreditError as e:
            logger.warning(f"Could not charge user {user.id} for video: {e}")

    return Response({
        'videoUrl': result['videoUrl'],
        'downloadUrl': result['downloadUrl'],
        'meta': result.get('meta'),
        'credits': credits,
    })


def _parse_list_field(raw):
    """A JSON array, or a comma separated string"""
    if not raw:
        return []
    if isinstance(raw, list):
        return raw
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return [item.strip() for item in str(raw).split(',') if item.strip()]
    return parsed if isinstance(parsed, list) else [parsed]


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([ApiRateThrottle, GenerateRateThrottle])
def generate_ad_creative(request):
    """
    Turn a product photo into a marketing poster.

    Options are validated before any limit or credit check; the poster
    costs as much as a photo and is charged once the provider returned it.
    """
    product_image = request.FILES.get('productImage')
    reference_image = request.FILES.get('referenceImage')
    if product_image is None:
        return Response({'error': 'Product image is required'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        validate_image_file(product_image)
        if reference_image is not None:
            validate_image_file(reference_image)
    except UploadError as e:
        logger.warning(f"Rejected ad creative upload from user {request.user.id}: {e}")
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    data = request.data
    options = {
        'product_category': data.get('productCategory') or DEFAULT_PRODUCT_CATEGORY,
        'output_format': data.get('outputFormat') or DEFAULT_OUTPUT_FORMAT,
        'design_template': data.get('designTemplate') or DEFAULT_DESIGN_TEMPLATE,
        'composition_style': data.get('compositionStyle') or DEFAULT_COMPOSITION_STYLE,
        'typography_style': data.get('typographyStyle') or DEFAULT_TYPOGRAPHY_STYLE,
        'color_scheme': data.get('colorScheme') or DEFAULT_COLOR_SCHEME,
        'custom_colors': _parse_json_field(data.get('customColors'), 'customColors'),
        'decorative_elements': _parse_list_field(data.get('decorativeElements')),
        'text_content': _parse_json_field(data.get('textContent'), 'textContent'),
        'target_audience': data.get('targetAudience') or None,
        'custom_instructions': data.get('customInstructions') or None,
    }
    errors = validate_ad_creative_options(options)
    if errors:
        return Response(
            {'error': 'Invalid options provided', 'details': errors},
            status=status.HTTP_400_BAD_REQUEST
        )

    limit_key = _rate_limit_key(request.user)
    limit = rate_limiter.can_generate(limit_key)
    if not limit['allowed']:
        logger.warning(f"Generation limit hit for user {request.user.id}: {limit['reason']}")
        return Response(
            {'error': 'Generation limit reached', **{k: v for k, v in limit.items() if k != 'allowed'}},
            status=status.HTTP_429_TOO_MANY_REQUESTS
        )

    credit_check = check_credits(request.user, 'photo')
    if not credit_check.allowed:
        return Response({
            'error': 'Insufficient credits',
            'message': 'You need at least 1 credit to generate an ad creative',
            'code': 'INSUFFICIENT_CREDITS',
            'balance': credit_check.balance,
            'required': credit_check.cost,
        }, status=status.HTTP_402_PAYMENT_REQUIRED)

    poster = build_ad_creative_prompt(**options)
    image_path = None
    reference_path = None
    try:
        image_path = save_upload(product_image)
        if reference_image is not None:
            reference_path = save_upload(reference_image)

        logger.info(
            f"Ad creative requested by user {request.user.id}: category={options['product_category']}, "
            f"template={options['design_template']}, format={options['output_format']}, "
            f"aspect_ratio={poster['aspect_ratio']}, reference={reference_path is not None}"
        )
        result = GeminiGenClient().generate_image(image_path, poster['prompt'], {
            'category': AD_CREATIVE_CATEGORY,
            'aspect_ratio': poster['aspect_ratio'],
            'image_style': image_style_for(options['design_template']),
            'reference_paths': [reference_path] if reference_path else [],
        })

        image_url = result['imageUrl']
        download_url = result['downloadUrl']
        local_path = download_and_save_image(image_url)
        if local_path:
            image_url = download_url = local_path

        credits = None
        try:
            credit = deduct_for_generation(request.user, 'photo', metadata={
                'category': AD_CREATIVE_CATEGORY,
                'productCategory': options['product_category'],
                'outputFormat': options['output_format'],
                'designTemplate': options['design_template'],
                'generatedImageUrl': image_url,
            })
            credits = {'deducted': CREDIT_COSTS['photo'], 'remaining': credit.balance}
        except CreditError as e:
            logger.warning(f"Could not charge user {request.user.id} for ad creative: {e}")

        rate_limiter.record_generation(limit_key)

        AIGeneration.objects.create(
            user=request.user,
            image_url=image_url,
            download_url=download_url or '',
            category=AD_CREATIVE_CATEGORY,
            prompt=poster['prompt'],
            metadata={**poster['metadata'], 'dimensions': poster['dimensions']},
        )

        return Response({
            'success': True,
            'imageUrl': image_url,
            'downloadUrl': download_url,
            'format': poster['format'],
            'aspectRatio': poster['aspect_ratio'],
            'dimensions': poster['dimensions'],
            'meta': result.get('meta'),
            'credits': credits,
        })
    except (GenerationError, requests.RequestException, OSError) as e:
        logger.error(f"Ad creative failed for user {request.user.id}: {e}", exc_info=True)
        lowered = str(e).lower()
        if 'rate limit' in lowered:
            message = 'AI service rate limit reached. Please wait a minute and try again.'
        elif 'timeout' in lowered or 'timed out' in lowered:
            message = 'Generation took too long. Please try with a simpler configuration.'
        else:
            message = 'Failed to generate ad creative. Please try again.'
        return Response(
            {'error': message, 'code': 'AD_CREATIVE_GENERATION_FAILED'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    finally:
        remove_temp_file(image_path)
        remove_temp_file(reference_path)


@api_view(['GET'])
@permission_classes([AllowAny])
@throttle_classes([ApiRateThrottle])
def download_image(request):
    """Serve a generated image as an attachment, from disk or from the provider"""
    url = request.query_params.get('url')
    if not url:
        return Response({'error': 'URL parameter is required'}, status=status.HTTP_400_BAD_REQUEST)

    safe_filename = UNSAFE_FILENAME_CHARS.sub('_', request.query_params.get('filename') or 'generated-image')

    try:
        content, content_type = fetch_image(url)
    except FileNotFoundError:
        return Response({'error': 'File not found'}, status=status.HTTP_404_NOT_FOUND)
    except UploadError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except requests.RequestException as e:
        logger.error(f"Download proxy failed for {url}: {e}")
        return Response(
            {'error': 'Failed to download image', 'details': str(e)},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    extension = extension_for_content_type(content_type)
    response = HttpResponse(content, content_type=content_type)
    response['Content-Disposition'] = f'attachment; filename="{safe_filename}.{extension}"'
    response['Content-Length'] = str(len(content))
    response['Cache-Control'] = 'no-cache'
    logger.info(f"Download proxy served {safe_filename}.{extension} ({len(content) / 1024:.1f}KB)")
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def generations_me(request):
    """Caller's generation history, newest first"""
    generations = (
        AIGeneration.objects.filter(user=request.user)
        .select_related('product')
        .order_by('-created_at', '-id')[:HISTORY_LIMIT]
    )
    return Response({'data': AIGenerationSerializer(generations, many=True).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def generation_create(request):
    serializer = AIGenerationSerializer(data=request.data)
    if serializer.is_valid():
        generation = serializer.save(user=request.user)
        return Response({'data': AIGenerationSerializer(generation).data}, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def generation_detail(request, pk):
    generation = get_object_or_404(AIGeneration.objects.select_related('product'), pk=pk, user=request.user)

    if request.method == 'GET':
        return Response({'data': AIGenerationSerializer(generation).data})

    generation.delete()
    logger.info(f"User {request.user.id} deleted generation {pk}")
    return Response(status=status.HTTP_204_NO_CONTENT)
