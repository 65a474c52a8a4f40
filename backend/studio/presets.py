"""
Studio presets: models, shoe legs, camera angles, lighting, backgrounds and
pose prompts. Reference images live under MEDIA_ROOT/studio/assets/.
"""
import os

from django.conf import settings

ASSETS_DIR = 'studio/assets'

PRESET_PROMPTS = [
    {
        'label': {'en': 'Pro Studio (White)', 'tn': 'Studio Pro (Abyadh)'},
        'prompt': 'High-end fashion e-commerce shot, pure white seamless background, soft evenly diffused lighting, 85mm lens, sharp focus on garment texture, professional model pose, minimal shadows, commercial catalog style.',
    },
    {
        'label': {'en': 'Pro Studio (Grey)', 'tn': 'Studio Pro (Gri)'},
        'prompt': 'Editorial studio portrait, neutral grey backdrop, cinematic three-point lighting, soft rim light, authentic skin texture, confident high-fashion pose, Vogue magazine aesthetic, sharp details.',
    },
    {
        'label': {'en': 'Luxury Campaign', 'tn': 'Publicité Luxe'},
        'prompt': 'Luxury fashion advertisement, warm ambient lighting, elegant indoor setting with blurred depth of field, rich colors, sophisticated mood, premium brand aesthetic, soft glow.',
    },
    {
        'label': {'en': 'Urban Editorial', 'tn': 'Urban Style'},
        'prompt': 'High-fashion street photography, golden hour natural light, modern architecture background (blurred), dynamic movement, candid yet polished, sharp garment details, lifestyle ad campaign.',
    },
]

POSE_PROMPTS = [
    {'label': {'en': 'Standing', 'tn': 'Weqef'}, 'key': 'standing', 'prompt': 'Full-length standing pose, relaxed weight shift, arms natural, outfit fully visible.'},
    {'label': {'en': 'Walking', 'tn': 'Yemchi'}, 'key': 'walking', 'prompt': 'Mid-step walking pose, gentle arm swing, natural motion blur avoided, outfit centered.'},
    {'label': {'en': 'Seated', 'tn': 'Qa3ed'}, 'key': 'seated', 'prompt': 'Seated or lightly leaning pose with straight posture, garment drape visible.'},
    {'label': {'en': 'Dynamic', 'tn': 'Dynamic'}, 'key': 'dynamic', 'prompt': 'Dynamic half-turn with confident stance, torso rotation, outfit front still clear.'},
]

SHOE_POSE_PROMPTS = [
    {'label': {'en': 'Low Angle Walking', 'tn': 'Yemchi (Low Angle)'}, 'key': 'shoe_walking', 'prompt': 'Low angle shot from ground level, capturing shoes in mid-step motion, street level perspective, focus on footwear details.'},
    {'label': {'en': 'Floating/Jump', 'tn': 'Naqza'}, 'key': 'shoe_jump', 'prompt': 'Dynamic mid-air jump shot, shoes clearly visible in suspension, energetic and sporty vibe, focus on sole and upper design.'},
    {'label': {'en': 'Seated (Feet Focus)', 'tn': 'Qa3ed (Rakkaz 3al Sabbat)'}, 'key': 'shoe_seated', 'prompt': 'Model seated with legs extended towards camera, shallow depth of field focusing sharply on the shoes, blurred background.'},
    {'label': {'en': 'Top Down', 'tn': 'Men Fouq'}, 'key': 'shoe_topdown', 'prompt': 'High angle top-down view (POV), looking down at feet, standing on textured surface, showcasing the top profile of the shoes.'},
]


def _model(id, name, gender, style_en, style_tn, description, file):
    return {
        'id': id,
        'name': {'en': name, 'tn': name},
        'gender': gender,
        'ethnicity': 'tunisian',
        'style': {'en': style_en, 'tn': style_tn},
        'description': description,
        'file': f'models/{file}',
    }


MODELS = [
    _model('asma', 'Asma', 'female', 'Modern Chic', 'Chic Moderne',
           'Tunisian woman named Asma, olive skin, long dark hair, modern chic fashion style, confident and friendly smile, North African features.',
           'girl-asma.png'),
    _model('eya', 'Eya', 'female', 'Casual/Street', 'Casual',
           'Young Tunisian woman named Eya, casual street style, energetic vibe, natural makeup, curly hair, North African features.',
           'girl-eya.png'),
    _model('safa', 'Safa', 'female', 'Elegant/Formal', 'Soirée',
           'Tunisian woman named Safa, elegant evening look, sophisticated hairstyle, soft lighting, refined North African beauty.',
           'girl-safa.png'),
    _model('sarra', 'Sarra', 'female', 'Traditional', 'Traditionnel',
           'Tunisian woman named Sarra, wearing modern-traditional fusion, warm smile, authentic North African features.',
           'girl-sarra.png'),
    _model('sirine', 'Sirine', 'female', 'Business', 'Business',
           'Tunisian woman named Sirine, professional business attire, sharp focus, confident pose, modern Tunis lifestyle.',
           'girl-sirine.png'),
    _model('ahmed', 'Ahmed', 'male', 'Casual', 'Casual',
           'Tunisian man named Ahmed, short dark hair, casual t-shirt and jeans look, friendly demeanor, North African features.',
           'man-ahmed.png'),
    _model('ayoub', 'Ayoub', 'male', 'Streetwear', 'Streetwear',
           'Young Tunisian man named Ayoub, trendy streetwear fashion, cool attitude, modern haircut, urban vibe.',
           'man-ayoub.png'),
    _model('fares', 'Fares', 'male', 'Sporty', 'Sport',
           'Tunisian man named Fares, athletic build, sporty outfit, energetic pose, outdoorsy look.',
           'man-fares.png'),
    _model('hassen', 'Hassen', 'male', 'Classic', 'Classique',
           'Tunisian man named Hassen, classic style, well-groomed, mature and sophisticated appearance.',
           'man-hassen.png'),
    _model('khalil', 'Khalil', 'male', 'Smart Casual', 'Smart Casual',
           'Tunisian man named Khalil, smart casual attire, glasses, intelligent look, modern professional.',
           'man-khalil.png'),
    _model('mounir', 'Mounir', 'male', 'Formal', 'Costume',
           'Tunisian man named Mounir, formal suit, sharp features, serious and commanding presence.',
           'man-mounir.png'),
]


def _legs(id, name_en, name_tn, gender, outfit_style, description):
    return {
        'id': id,
        'name': {'en': name_en, 'tn': name_tn},
        'gender': gender,
        'outfitStyle': outfit_style,
        'description': description,
        'file': f'legs/{id}.png',
    }


SHOE_MODELS = [
    _legs('female-black-jeans', 'Black Jeans', 'Jeans Kahla', 'female', 'casual', 'Female legs wearing fitted black denim jeans'),
    _legs('female-blue-jeans', 'Blue Jeans', 'Jeans Azra9', 'female', 'casual', 'Female legs wearing classic blue denim jeans'),
    _legs('female-white-pants', 'White Pants', 'Sarwal Abyad', 'female', 'casual', 'Female legs wearing white casual pants'),
    _legs('female-beige-pants', 'Beige Pants', 'Sarwal Beige', 'female', 'casual', 'Female legs wearing beige khaki pants'),
    _legs('female-black-leggings', 'Black Leggings', 'Leggings Kahla', 'female', 'sporty', 'Female legs wearing black athletic leggings'),
    _legs('female-dark-skinny-jeans', 'Dark Skinny Jeans', 'Skinny Jeans Dahkra', 'female', 'casual', 'Female legs wearing dark wash skinny jeans'),
    _legs('male-black-jeans', 'Black Jeans', 'Jeans Kahla', 'male', 'casual', 'Male legs wearing black denim jeans'),
    _legs('male-blue-jeans', 'Blue Jeans', 'Jeans Azra9', 'male', 'casual', 'Male legs wearing classic blue denim jeans'),
    _legs('male-gray-joggers', 'Gray Joggers', 'Joggers Rmadi', 'male', 'sporty', 'Male legs wearing gray athletic jogger pants'),
    _legs('male-black-sport-pants', 'Black Sport Pants', 'Sarwal Sport Kahla', 'male', 'sporty', 'Male legs wearing black athletic sport pants'),
    _legs('male-beige-chinos', 'Beige Chinos', 'Chinos Beige', 'male', 'smart-casual', 'Male legs wearing beige khaki chino pants'),
    _legs('male-dark-gray-pants', 'Dark Gray Pants', 'Sarwal Rmadi Dahkar', 'male', 'casual', 'Male legs wearing dark gray casual pants'),
]

SHOE_CAMERA_ANGLES = [
    {
        'id': 'side_profile',
        'name': {'en': 'Side Profile', 'tn': 'Min Jnib'},
        'key': 'side_profile',
        'prompt': 'Side profile view, 90-degree angle showing the full silhouette of the shoe, clean lines, focus on design details and shoe height',
        'icon': 'SideView',
    },
    {
        'id': 'three_quarter',
        'name': {'en': '3/4 Angle', 'tn': 'Zewiya 3/4'},
        'key': 'three_quarter',
        'prompt': '3/4 front angle (classic product shot), slightly elevated view, showing both front and side features, professional e-commerce style',
        'icon': 'Camera',
    },
    {
        'id': 'front_view',
        'name': {'en': 'Front View', 'tn': 'Min Qoddam'},
        'key': 'front_view',
        'prompt': 'Direct front view, symmetrical composition, showcasing toe box, laces, and front design elements',
        'icon': 'FrontView',
    },
    {
        'id': 'top_down',
        'name': {'en': 'Top-Down', 'tn': 'Min Fouq'},
        'key': 'top_down',
        'prompt': "Overhead top-down view (bird's eye), looking directly down at shoes, shows top surface and lacing pattern",
        'icon': 'ArrowDown',
    },
    {
        'id': 'low_angle',
        'name': {'en': 'Low Angle (Ground)', 'tn': 'Min Ta7t'},
        'key': 'low_angle',
        'prompt': 'Low ground-level angle, shot from below looking slightly up, dramatic and powerful perspective, emphasizes height and presence',
        'icon': 'ArrowUp',
    },
    {
        'id': 'detail_closeup',
        'name': {'en': 'Detail Close-Up', 'tn': 'Tafsil'},
        'key': 'detail_closeup',
        'prompt': 'Extreme close-up detail shot, macro focus on specific features like branding, stitching, material texture, or sole pattern',
        'icon': 'Focus',
    },
]

SHOE_LIGHTING_STYLES = [
    {
        'id': 'studio_bright',
        'name': {'en': 'Studio Bright', 'tn': 'Studio Mdhawwa'},
        'key': 'studio_bright',
        'prompt': 'Professional studio lighting, bright and evenly diffused, minimal shadows, clean commercial look, pure white or neutral background',
        'mood': 'clean',
    },
    {
        'id': 'natural_soft',
        'name': {'en': 'Natural Soft', 'tn': 'Dhaw Tabi3i'},
        'key': 'natural_soft',
        'prompt': 'Soft natural daylight, gentle shadows, outdoor feel, balanced exposure, authentic and approachable aesthetic',
        'mood': 'natural',
    },
    {
        'id': 'dramatic_side',
        'name': {'en': 'Dramatic Side-Lit', 'tn': 'Dhaw Qawi Min Jnib'},
        'key': 'dramatic_side',
        'prompt': 'Strong directional side lighting, dramatic shadows, high contrast, bold and edgy mood, emphasizes texture and contours',
        'mood': 'dramatic',
    },
    {
        'id': 'golden_hour',
        'name': {'en': 'Golden Hour', 'tn': 'Dhaw Dhahabi'},
        'key': 'golden_hour',
        'prompt': 'Warm golden hour sunlight, sunset glow, long soft shadows, cinematic and premium feel, rich warm tones',
        'mood': 'warm',
    },
    {
        'id': 'moody_dark',
        'name': {'en': 'Moody Dark', 'tn': 'Dhaw Dahkar'},
        'key': 'moody_dark',
        'prompt': 'Low-key dark lighting, mysterious atmosphere, spotlight on shoes, dark background, luxury and sophistication',
        'mood': 'moody',
    },
    {
        'id': 'high_contrast',
        'name': {'en': 'High Contrast', 'tn': 'Contrast 3ali'},
        'key': 'high_contrast',
        'prompt': 'High contrast lighting setup, deep blacks and bright highlights, punchy and bold, modern editorial style',
        'mood': 'bold',
    },
]

BACKGROUNDS = [
    {
        'id': 'sidi_bou_said',
        'name': {'en': 'Sidi Bou Said', 'tn': 'Sidi Bou Said'},
        'prompt': 'Sidi Bou Said, Tunisia, iconic blue and white architecture, cobblestone street, bright Mediterranean sunlight, vibrant bougainvillea flowers, depth of field.',
        'file': 'backgrounds/sidibou.png',
    },
    {
        'id': 'medina',
        'name': {'en': 'Medina (Tunis)', 'tn': 'El Medina'},
        'prompt': 'Traditional Tunisian Medina, ancient stone arches, intricately carved wooden doors, warm lantern lighting, cultural heritage atmosphere, soft shadows.',
        'file': 'backgrounds/madina.png',
    },
    {
        'id': 'sahara',
        'name': {'en': 'Sahara Dunes', 'tn': 'Sahara'},
        'prompt': 'Tunisian Sahara desert, golden sand dunes, sunset golden hour lighting, vast horizon, warm tones, cinematic travel aesthetic.',
        'file': 'backgrounds/sahara.png',
    },
    {
        'id': 'carthage',
        'name': {'en': 'Carthage Ruins', 'tn': 'Carthage'},
        'prompt': 'Ancient Carthage ruins, Roman columns, historic stone texture, blue sky background, majestic and timeless atmosphere.',
        'file': 'backgrounds/carthage.png',
    },
    {
        'id': 'gammarth_hotel',
        'name': {'en': 'Luxury Hotel (Gammarth)', 'tn': 'Hotel Luxe (Gammarth)'},
        'prompt': 'Luxury beach resort in Gammarth, infinity pool background, palm trees, turquoise sea view, high-end vacation vibe, bright and airy.',
        'file': 'backgrounds/gammarth.png',
    },
    {
        'id': 'studio_grey',
        'name': {'en': 'Studio', 'tn': 'Studio'},
        'prompt': 'Professional studio setting, neutral backdrop, soft cinematic lighting, high-fashion look.',
        'file': 'backgrounds/studio.png',
    },
]


def asset_url(relative_file):
    return f"{settings.MEDIA_URL.rstrip('/')}/{ASSETS_DIR}/{relative_file}"


def asset_path(relative_file):
    return os.path.join(settings.MEDIA_ROOT, ASSETS_DIR, relative_file)


def _public(entries):
    """Replace the asset file of each entry with its preview URL"""
    result = []
    for entry in entries:
        public = {key: value for key, value in entry.items() if key != 'file'}
        public['previewUrl'] = asset_url(entry['file'])
        result.append(public)
    return result


def find_model(model_id):
    return next((model for model in MODELS if model['id'] == model_id), None)


def find_shoe_model(model_id):
    return next((model for model in SHOE_MODELS if model['id'] == model_id), None)


def find_background(background_id):
    return next((background for background in BACKGROUNDS if background['id'] == background_id), None)


def reference_for(model_id, category=None):
    """
    Resolve a model id to (description, reference_image_path).

    Shoes use the leg models, every other category the full-body models.
    The path is None when the reference image is not installed.
    """
    model = find_shoe_model(model_id) if category == 'shoes' else find_model(model_id)
    if model is None:
        return None, None
    path = asset_path(model['file'])
    return model['description'], path if os.path.exists(path) else None


def get_studio_config():
    return {
        'models': _public(MODELS),
        'posePrompts': POSE_PROMPTS,
        'backgrounds': _public(BACKGROUNDS),
        'shoeModels': _public(SHOE_MODELS),
        'shoePosePrompts': SHOE_POSE_PROMPTS,
        'shoeCameraAngles': SHOE_CAMERA_ANGLES,
        'shoeLightingStyles': SHOE_LIGHTING_STYLES,
        'presetPrompts': PRESET_PROMPTS,
    }
