"""
Prompt construction for product photo and video generation.

Image prompts are assembled in a fixed order because the model weights the
start and the end of a prompt most: color lock, category base prompt,
style preset, user text, quality boost, negatives, final reminder.
"""
import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_STYLE = 'ecommerce_clean'
DEFAULT_CATEGORY = 'clothes'

IMAGE_STYLE_PRESETS = {
    # E-commerce
    'ecommerce_clean': {
        'id': 'ecommerce_clean',
        'name': 'E-commerce Clean',
        'description': 'Pure white background, perfect for product listings',
        'prompt': 'Clean white studio backdrop, even diffused lighting, no shadows on background, product-focused composition, pure white (#FFFFFF) background, professional e-commerce photography, high-key lighting, crisp sharp focus',
        'aspect_ratio': '3:4',
        'category': 'commercial',
    },
    'ecommerce_soft': {
        'id': 'ecommerce_soft',
        'name': 'E-commerce Soft',
        'description': 'Soft gradient background with subtle shadows',
        'prompt': 'Soft gradient studio background, gentle shadow beneath model, professional catalog photography, neutral gray-to-white gradient, balanced exposure, commercial quality, Amazon/Zalando style product shot',
        'aspect_ratio': '3:4',
        'category': 'commercial',
    },

    # Editorial
    'editorial_vogue': {
        'id': 'editorial_vogue',
        'name': 'Editorial Vogue',
        'description': 'High-fashion magazine editorial style',
        'prompt': 'High-fashion editorial photography, Vogue magazine aesthetic, dramatic studio lighting with strong key light, sophisticated pose, fashion-forward composition, deep shadows and highlights, artistic color grading, luxury fashion campaign quality',
        'aspect_ratio': '3:4',
        'category': 'editorial',
    },
    'editorial_minimal': {
        'id': 'editorial_minimal',
        'name': 'Editorial Minimal',
        'description': 'Clean minimalist editorial look',
        'prompt': 'Minimalist editorial photography, clean lines, negative space utilization, understated elegance, modern Scandinavian aesthetic, muted color palette, architectural simplicity, high-end brand campaign style',
        'aspect_ratio': '3:4',
        'category': 'editorial',
    },

    # Lifestyle
    'lifestyle_urban': {
        'id': 'lifestyle_urban',
        'name': 'Street Style Urban',
        'description': 'Urban street photography aesthetic',
        'prompt': 'Street style photography, urban city backdrop, natural candid feel, golden hour sunlight, authentic street fashion vibe, brick walls or city architecture, contemporary urban lifestyle, Instagram influencer aesthetic',
        'aspect_ratio': '3:4',
        'category': 'lifestyle',
    },
    'lifestyle_outdoor': {
        'id': 'lifestyle_outdoor',
        'name': 'Outdoor Natural',
        'description': 'Natural outdoor lifestyle setting',
        'prompt': 'Outdoor lifestyle photography, natural daylight, lush greenery or beach setting, relaxed authentic pose, warm golden tones, aspirational lifestyle imagery, vacation editorial feel, natural environment',
        'aspect_ratio': '3:4',
        'category': 'lifestyle',
    },
    'lifestyle_cafe': {
        'id': 'lifestyle_cafe',
        'name': 'Cafe & Indoor',
        'description': 'Cozy indoor cafe or home setting',
        'prompt': 'Indoor lifestyle photography, cozy cafe or modern interior setting, warm ambient lighting, bokeh background, casual relaxed atmosphere, lifestyle brand aesthetic, social media ready',
        'aspect_ratio': '3:4',
        'category': 'lifestyle',
    },

    # Luxury
    'luxury_campaign': {
        'id': 'luxury_campaign',
        'name': 'Luxury Campaign',
        'description': 'High-end luxury brand advertising',
        'prompt': 'Luxury brand campaign photography, premium studio setup, dramatic Rembrandt lighting, rich deep shadows, opulent atmosphere, Gucci/Chanel advertising aesthetic, sophisticated color palette, ultra-premium quality',
        'aspect_ratio': '3:4',
        'category': 'luxury',
    },
    'luxury_dark': {
        'id': 'luxury_dark',
        'name': 'Dark Luxury',
        'description': 'Moody dark premium aesthetic',
        'prompt': 'Dark luxury photography, low-key dramatic lighting, deep black background, spotlight on product, mysterious sophisticated mood, high-end watch/jewelry campaign style, cinematic shadows',
        'aspect_ratio': '3:4',
        'category': 'luxury',
    },

    # Social media
    'instagram_aesthetic': {
        'id': 'instagram_aesthetic',
        'name': 'Instagram Aesthetic',
        'description': 'Optimized for Instagram feed',
        'prompt': 'Instagram-optimized photography, trendy aesthetic, soft warm tones, lifestyle influencer style, perfectly composed for social media, aspirational yet authentic feel, engagement-optimized composition, warm color filter',
        'aspect_ratio': '3:4',
        'category': 'social',
    },
    'tiktok_dynamic': {
        'id': 'tiktok_dynamic',
        'name': 'TikTok Dynamic',
        'description': 'Bold and eye-catching for short-form',
        'prompt': 'Bold dynamic photography, vibrant saturated colors, high contrast, attention-grabbing composition, Gen-Z aesthetic, trendy and energetic, perfect for vertical video thumbnails, pop-culture inspired',
        'aspect_ratio': '9:16',
        'category': 'social',
    },

    # Artistic
    'artistic_film': {
        'id': 'artistic_film',
        'name': 'Film Grain Vintage',
        'description': 'Nostalgic film photography look',
        'prompt': 'Vintage film photography aesthetic, subtle film grain, slightly faded colors, nostalgic 35mm film look, soft analog warmth, Kodak Portra or Fuji color palette, authentic retro feel',
        'aspect_ratio': '3:4',
        'category': 'artistic',
    },
}

# Style values accepted by the generation API
API_STYLE_MAP = {
    'ecommerce_clean': 'Stock Photo',
    'ecommerce_soft': 'Stock Photo',
    'editorial_vogue': 'Portrait Fashion',
    'editorial_minimal': 'Photorealistic',
    'lifestyle_urban': 'Dynamic',
    'lifestyle_outdoor': 'Photorealistic',
    'lifestyle_cafe': 'Photorealistic',
    'luxury_campaign': 'Portrait Cinematic',
    'luxury_dark': 'Portrait Cinematic',
    'instagram_aesthetic': 'Fashion',
    'tiktok_dynamic': 'Dynamic',
    'artistic_film': 'Creative',
}
DEFAULT_API_STYLE = 'Photorealistic'

IMAGE_QUALITY_BOOST = ', '.join([
    'captured on Hasselblad H6D-400c medium format',
    'Phase One IQ4 150MP sensor quality',
    'Zeiss Otus 85mm f/1.4 lens sharpness',
    'professional Broncolor studio lighting',
    'softbox diffused key light',
    'clean catchlights in eyes',
    'ultra high resolution 8K',
    'razor sharp focus on product',
    'natural skin texture and pores',
    'authentic fabric weave and material texture',
    'photorealistic rendering',
    'color managed workflow',
    'proper exposure and white balance',
])

BASE_NEGATIVES = [
    # Color protection
    'no color shift',
    'no color cast',
    'no tint',
    'no warm filter',
    'no cool filter',
    'no sepia',
    'no vintage filter',
    'no instagram filter',
    'no saturation change',
    'no hue rotation',
    # Quality
    'no blurry',
    'no soft focus',
    'no jpeg artifacts',
    'no noise',
    'no pixelation',
    # Generation artifacts
    'no extra fingers',
    'no deformed hands',
    'no distorted face',
    'no extra limbs',
    'no floating objects',
    'no unnatural poses',
    # Product preservation
    'no logo alteration',
    'no pattern change',
    'no texture modification',
    'no product deformation',
    'no brand modification',
]
WHITE_PRODUCT_NEGATIVES = ['no yellowing', 'no cream tint', 'no beige cast', 'no tan color']

AD_CREATIVE_CATEGORY = 'adCreative'
AD_CREATIVE_PRESERVATION = (
    "[CRITICAL: PRODUCT COLOR PRESERVATION] The product in the reference image must be preserved with "
    "its ORIGINAL colors exactly as shown. Do NOT change the product's color to match the brand color "
    "scheme. Apply brand colors ONLY to decorative elements, backgrounds, and effects - NEVER to the "
    "product itself."
)
AD_CREATIVE_REMINDER = (
    "FINAL REMINDER: PRESERVE THE PRODUCT'S ORIGINAL COLORS EXACTLY. Brand color palette is for "
    "decorative elements ONLY. Do not recolor the product."
)

SUPPORTED_ASPECT_RATIOS = ('1:1', '16:9', '9:16', '4:3', '3:4')
ASPECT_RATIO_MAPPINGS = {
    '4:5': '3:4',  # Instagram portrait
    '2:3': '3:4',  # Pinterest
    '820:312': '16:9',  # Facebook cover
    '1.91:1': '16:9',  # LinkedIn
    '1200:628': '16:9',
    '1600:900': '16:9',  # Twitter
}

HEX_IN_TEXT = re.compile(r'#[A-Fa-f0-9]{6}')
HEX_COLOR = re.compile(r'^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$', re.IGNORECASE)


# Color helpers

def hex_to_rgb(hex_color):
    """'#RRGGBB' -> (r, g, b), or None when malformed"""
    match = HEX_COLOR.match(hex_color or '')
    if not match:
        return None
    return tuple(int(part, 16) for part in match.groups())


def is_white_color(hex_color):
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return False
    low, high = min(rgb), max(rgb)
    lightness = (low + high) / 2 / 255
    if high == low:
        saturation = 0
    else:
        divisor = 510 - high - low if high + low > 255 else high + low
        saturation = (high - low) / divisor
    return lightness > 0.85 and saturation < 0.15


def is_black_color(hex_color):
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return False
    return sum(rgb) / 3 / 255 < 0.15


def semantic_color_name(hex_color):
    """Human color name for a hex value, from its HSL coordinates"""
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return 'unknown'

    r, g, b = rgb
    high, low = max(rgb), min(rgb)
    lightness = (high + low) / 2 / 255
    if high == low:
        saturation = 0
    else:
        divisor = 510 - high - low if lightness > 0.5 else high + low
        saturation = (high - low) / divisor

    hue = 0.0
    if high != low:
        delta = high - low
        if high == r:
            hue = ((g - b) / delta + (6 if g < b else 0)) / 6
        elif high == g:
            hue = ((b - r) / delta + 2) / 6
        else:
            hue = ((r - g) / delta + 4) / 6
    hue *= 360

    if saturation < 0.1:
        if lightness > 0.9:
            return 'pure white'
        if lightness > 0.7:
            return 'light gray'
        if lightness > 0.4:
            return 'gray'
        if lightness > 0.15:
            return 'dark gray'
        return 'black'

    def shade(light, base, dark=None):
        if lightness > 0.6:
            return light
        if dark and lightness < 0.35:
            return dark
        return base

    if hue < 15 or hue >= 345:
        return shade('light red', 'red', 'dark red')
    if hue < 45:
        return shade('peach', 'orange', 'brown')
    if hue < 70:
        return shade('light yellow', 'yellow')
    if hue < 170:
        return shade('light green', 'green', 'dark green')
    if hue < 200:
        return shade('light cyan', 'teal')
    if hue < 260:
        return shade('light blue', 'blue', 'navy')
    if hue < 290:
        return shade('lavender', 'purple')
    return shade('light pink', 'pink')


def build_color_lock_clause(color_hex, color_name=None, color_palette=None, is_manual_override=False):
    if not color_hex:
        return ''

    semantic = color_name or semantic_color_name(color_hex)
    emphasis = 'USER SPECIFIED' if is_manual_override else 'DETECTED'

    if is_white_color(color_hex):
        parts = [
            f"[{emphasis} COLOR: PURE WHITE {color_hex}] This product is WHITE - not cream, not beige, "
            f"not off-white, not tan. It is PURE WHITE."
        ]
    elif is_black_color(color_hex):
        parts = [
            f"[{emphasis} COLOR: BLACK {color_hex}] This product is BLACK - not dark gray, not charcoal, "
            f"not navy. It is TRUE BLACK."
        ]
    else:
        parts = [
            f"[{emphasis} COLOR: {semantic.upper()} {color_hex}] Product is {semantic}. Preserve this "
            f"EXACT color - no hue shift, no brightness change."
        ]

    if color_palette:
        first = color_palette[0] if isinstance(color_palette[0], dict) else {}
        primary_percent = first.get('percentage') or 80
        parts.append(f"Primary color {semantic} covers {primary_percent}% of product.")

    return ' '.join(parts)


def build_negative_prompt(is_white_product=False):
    negatives = list(BASE_NEGATIVES)
    if is_white_product:
        negatives.extend(WHITE_PRODUCT_NEGATIVES)
    return ', '.join(negatives)


# Category base prompts

def _persona_description(persona):
    if not isinstance(persona, dict):
        return ''
    parts = []
    if persona.get('gender'):
        parts.append(persona['gender'])
    if persona.get('ethnicity'):
        parts.append(f"{persona['ethnicity']} ethnicity")
    if persona.get('style'):
        parts.append(f"{persona['style']} style")
    return ', '.join(parts)


def build_base_prompt(category, options=None, has_model_reference=False):
    """Product and model instructions for a category (clothes by default)"""
    options = options or {}
    model_description = options.get('model_description') or ''

    if category == AD_CREATIVE_CATEGORY:
        parts = [
            'Use the product in the first reference image as the hero of a professional marketing poster.',
            'Preserve the product EXACTLY - same shape, color, logos, text, and all details.',
        ]
        if len(options.get('reference_paths') or []) > 0:
            parts.append('Use the additional reference image only as inspiration for layout and mood.')
        return ' '.join(parts)

    if category == 'shoes':
        parts = [
            'Create a high-fidelity professional product photo of these shoes worn by a real person.',
            'The shoes in the reference image must be preserved EXACTLY - same color, design, logos, text, and all details.',
        ]
        shoe_model_description = options.get('shoe_model_description') or ''
        if has_model_reference:
            parts.append(
                'Use the second reference image as the leg/feet and outfit reference. The legs/feet in the '
                'output should resemble the person in the second image.'
            )
        elif shoe_model_description:
            parts.append(f"The model should have: {shoe_model_description}.")
        else:
            parts.append('Show the shoes on natural-looking human legs with appropriate casual attire.')
        if options.get('shoe_camera_angle'):
            parts.append(options['shoe_camera_angle'])
        if options.get('shoe_lighting'):
            parts.append(options['shoe_lighting'])
        parts.append('Focus sharply on shoe details. LOCK shoe color and design exactly to the reference image.')
        return ' '.join(parts)

    if category == 'bags':
        parts = [
            'Create a high-fidelity professional product photo of this bag.',
            'The bag in the reference image must be preserved EXACTLY - same color, material, hardware, logos, and all details.',
        ]
        if has_model_reference:
            parts.append('Use the second reference image as the model reference for pose and overall look.')
        if model_description:
            parts.append(f"Show the bag styled with a model who has: {model_description}.")
        return ' '.join(parts)

    if category == 'accessories':
        parts = [
            'Create a high-fidelity professional product photo of this accessory.',
            'The accessory in the reference image must be preserved EXACTLY - same color, material, design, and all details.',
        ]
        if has_model_reference:
            parts.append('Use the second reference image as the model reference for pose and overall look.')
        if model_description:
            parts.append(f"Show the accessory on a model who has: {model_description}.")
        return ' '.join(parts)

    parts = [
        'Create a high-fidelity fashion product photo: a real human model wearing the EXACT same garment from the reference image.',
        'Preserve all logos, text, patterns, graphics, and details. LOCK the EXACT garment color with no hue or brightness shifts.',
    ]
    if has_model_reference:
        parts.append(
            'Use the second reference image as the model reference. The model in the output should resemble '
            'the person in the second image.'
        )
    if model_description:
        parts.append(f"The model should be: {model_description}.")
    else:
        persona = _persona_description(options.get('model_persona'))
        if persona:
            parts.append(f"The model should be: {persona}.")
    return ' '.join(parts)


def normalize_aspect_ratio(ratio):
    """Map any ratio onto one the API supports"""
    if ratio in SUPPORTED_ASPECT_RATIOS:
        return ratio
    logger.warning(f"Unsupported aspect ratio '{ratio}'")
    if ratio in ASPECT_RATIO_MAPPINGS:
        return ASPECT_RATIO_MAPPINGS[ratio]
    try:
        width, height = (float(part) for part in str(ratio).split(':'))
    except ValueError:
        return '1:1'
    if width > height:
        return '16:9'
    if height > width:
        return '9:16'
    return '1:1'


def _color_hex_from(options, user_prompt):
    color_hex = options.get('color_hex') or options.get('manual_color_hex')
    if not color_hex and user_prompt:
        match = HEX_IN_TEXT.search(user_prompt)
        color_hex = match.group(0).upper() if match else None
    return color_hex


def build_image_prompt(base_prompt, user_prompt, options=None):
    """
    Assemble the final image prompt.

    Returns (prompt, aspect_ratio).
    """
    options = options or {}
    parts = []
    is_ad_creative = options.get('category') == AD_CREATIVE_CATEGORY
    color_hex = None if is_ad_creative else _color_hex_from(options, user_prompt)
    is_white_product = bool(color_hex) and is_white_color(color_hex)

    # 1. Color lock (the brand palette of an ad creative must not recolor the product)
    if is_ad_creative:
        parts.append(AD_CREATIVE_PRESERVATION)
    elif color_hex:
        parts.append(build_color_lock_clause(
            color_hex,
            options.get('color_name'),
            options.get('color_palette'),
            is_manual_override=bool(options.get('manual_color_hex')),
        ))
        logger.debug(f"Color lock activated: {color_hex}")

    # 2. Base prompt
    parts.append(base_prompt)

    # 3. Style preset
    style = IMAGE_STYLE_PRESETS.get(options.get('image_style') or DEFAULT_IMAGE_STYLE)
    if style:
        parts.append(style['prompt'])

    # 4. User prompt
    if user_prompt and user_prompt.strip():
        parts.append(user_prompt.strip())

    # 5. Quality boost
    parts.append(IMAGE_QUALITY_BOOST)

    # 6. Negatives
    parts.append(f"Avoid: {build_negative_prompt(is_white_product)}.")

    # 7. Final reminder
    if is_ad_creative:
        parts.append(AD_CREATIVE_REMINDER)
    elif color_hex:
        if is_white_product:
            parts.append(f"REMINDER: This product is PURE WHITE ({color_hex}). Output must show a WHITE product.")
        else:
            parts.append(
                f"FINAL REMINDER: Product color is {semantic_color_name(color_hex)} ({color_hex}) - preserve exactly."
            )

    # An ad creative is framed by its output format, not by the style preset
    if is_ad_creative and options.get('aspect_ratio'):
        aspect_ratio = options['aspect_ratio']
    else:
        aspect_ratio = (style or {}).get('aspect_ratio') or options.get('aspect_ratio') or '3:4'
    return ' '.join(parts), normalize_aspect_ratio(aspect_ratio)


def get_api_style(image_style):
    return API_STYLE_MAP.get(image_style, DEFAULT_API_STYLE)


# Video

VIDEO_MOTION_PRESETS = {
    'clothes': {
        'runway_walk': {
            'id': 'runway_walk',
            'name': 'Runway Walk',
            'description': 'Model walks like on a fashion runway',
            'prompt': 'Smooth runway walk, confident stride, subtle hip movement, fabric flowing naturally, professional lighting consistent, camera follows model smoothly, high-end fashion commercial, 4K cinematic, garment details visible throughout',
            'recommended': True,
        },
        'model_turn': {
            'id': 'model_turn',
            'name': 'Model Turn',
            'description': '360° turn to show all angles',
            'prompt': 'Graceful 360-degree turn on spot, fabric movement visible, smooth pivot, showing front, side, and back of garment, professional lighting maintained through rotation, fashion show quality',
            'recommended': True,
        },
        'subtle_pose': {
            'id': 'subtle_pose',
            'name': 'Subtle Movement',
            'description': 'Gentle pose transitions',
            'prompt': 'Minimal elegant movement, gentle weight shift, slight arm adjustment, breathing animation, maintaining fashion pose, professional model micro-movements, high-end lookbook style',
        },
        'fabric_flow': {
            'id': 'fabric_flow',
            'name': 'Fabric in Motion',
            'description': 'Highlight fabric movement',
            'prompt': 'Dramatic fabric movement, wind-blown effect, material flowing and draping, showcasing texture and flow, editorial fashion aesthetic, slow motion fabric physics, premium commercial quality',
        },
    },
    'shoes': {
        'walking_feet': {
            'id': 'walking_feet',
            'name': 'Walking Feet',
            'description': 'Natural walking motion close-up',
            'prompt': 'Focus on feet and legs, natural walking motion from low angle, each step clearly visible, shoe flex and movement shown, clean floor reflection, professional footwear commercial, steady tracking shot',
            'recommended': True,
        },
        'shoe_rotation': {
            'id': 'shoe_rotation',
            'name': '360° Rotation',
            'description': 'Orbit around the shoe',
            'prompt': 'Smooth 360-degree orbit around the shoe, revealing all angles, focus on design details and craftsmanship, professional product photography in motion, studio lighting, no model visible',
            'recommended': True,
        },
        'step_detail': {
            'id': 'step_detail',
            'name': 'Step Detail',
            'description': 'Close-up stepping motion',
            'prompt': 'Close-up shot of foot stepping forward, slow motion, sole flex visible, heel-to-toe motion, showcasing shoe performance and comfort, athletic commercial style',
        },
        'lacing_focus': {
            'id': 'lacing_focus',
            'name': 'Lacing Focus',
            'description': 'Zoom on lacing and details',
            'prompt': 'Camera slowly zooms and pans across shoe details, focusing on lacing, stitching, material texture, tongue, and branding, macro product video style',
        },
    },
    'bags': {
        'carry_walk': {
            'id': 'carry_walk',
            'name': 'Carry & Walk',
            'description': 'Model walking with bag',
            'prompt': 'Model walking naturally with bag, arm swing with bag visible, lifestyle context, bag moves realistically with body motion, fashion accessory commercial, focus on bag throughout',
            'recommended': True,
        },
        'bag_360': {
            'id': 'bag_360',
            'name': '360° Display',
            'description': 'Full rotation product shot',
            'prompt': 'Smooth 360-degree rotation of bag, floating or on display stand, studio lighting, showing all sides, hardware details, interior briefly visible, luxury product commercial',
            'recommended': True,
        },
        'open_close': {
            'id': 'open_close',
            'name': 'Open & Close',
            'description': 'Show interior and closure',
            'prompt': 'Hands opening bag to reveal interior, showing pockets and organization, then closing with click of clasp or zipper, luxury detail shot, close-up hands product video',
        },
        'strap_adjust': {
            'id': 'strap_adjust',
            'name': 'Strap Adjustment',
            'description': 'Adjusting shoulder strap',
            'prompt': 'Model adjusting bag strap on shoulder, showing strap length and comfort, lifestyle natural movement, casual confident styling, fashion accessory lifestyle video',
        },
    },
    'accessories': {
        'sparkle_reveal': {
            'id': 'sparkle_reveal',
            'name': 'Sparkle Reveal',
            'description': 'Light catching details',
            'prompt': 'Slow elegant movement, light catching on jewelry/watch surfaces, subtle sparkle effects, rotating to show facets and details, luxury commercial style, dramatic lighting',
            'recommended': True,
        },
        'wrist_gesture': {
            'id': 'wrist_gesture',
            'name': 'Wrist Gesture',
            'description': 'Natural wrist/hand movement',
            'prompt': 'Natural wrist and hand movement, watch or bracelet visible, elegant gestures, checking time or adjusting cuff, lifestyle context, premium accessory commercial',
            'recommended': True,
        },
        'zoom_detail': {
            'id': 'zoom_detail',
            'name': 'Zoom Detail',
            'description': 'Macro zoom on details',
            'prompt': 'Camera slowly zooms into product details, extreme close-up on craftsmanship, engravings, gemstones, mechanism, premium macro photography in motion',
        },
        'floating_orbit': {
            'id': 'floating_orbit',
            'name': 'Floating Orbit',
            'description': 'Product floating with camera orbit',
            'prompt': 'Product floating in space with gentle rotation, camera orbiting slowly, dramatic rim lighting, luxury product video, clean dark background, jewelry commercial quality',
        },
    },
}

VIDEO_QUALITY_BOOST = ', '.join([
    '8K resolution quality',
    'professional color grading',
    'smooth 60fps motion',
    'studio lighting consistency',
    'no flickering or artifacts',
    'natural motion blur',
    'high dynamic range',
    'commercial broadcast quality',
])


def get_motion_presets(category):
    return VIDEO_MOTION_PRESETS.get(category) or VIDEO_MOTION_PRESETS[DEFAULT_CATEGORY]


def get_default_motion_preset(category):
    presets = list(get_motion_presets(category).values())
    for preset in presets:
        if preset.get('recommended'):
            return preset
    return presets[0]


def build_video_prompt(user_prompt, category=None, motion_style=None):
    presets = get_motion_presets(category or DEFAULT_CATEGORY)
    motion = presets.get(motion_style) if motion_style else None
    if motion is None:
        motion = get_default_motion_preset(category or DEFAULT_CATEGORY)

    parts = [
        'Transform this static fashion product image into a smooth, professional video.',
        motion['prompt'],
    ]
    if user_prompt and user_prompt.strip():
        parts.append(user_prompt.strip())
    parts.append(VIDEO_QUALITY_BOOST)
    parts.append(
        'Maintain exact product appearance, colors, and details from the source image. No morphing or '
        'distortion of product features. Consistent lighting throughout.'
    )
    parts.append(
        'Avoid: jump cuts, camera shake, sudden movements, unnatural poses, color shifts, blurry frames, '
        'low quality compression.'
    )
    return ' '.join(parts)
