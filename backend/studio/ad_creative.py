"""
Ad creative presets and the marketing poster prompt builder.

An ad creative is a product photo turned into a poster: a design
template sets the overall look, a composition places the product, a
palette colors the decorations (never the product) and the output
format fixes the aspect ratio. Text is never rendered; the prompt only
reserves clean zones for it.
"""
import re

HEX_COLOR = re.compile(r'^#[0-9A-Fa-f]{6}$')
COLOR_ROLES = ('primary', 'secondary', 'accent')
TEXT_ZONES = ('headline', 'subheadline', 'offer', 'cta', 'contact')
MAX_TEXT_LENGTH = 200
MAX_INSTRUCTIONS_LENGTH = 1000

DEFAULT_PRODUCT_CATEGORY = 'other'
DEFAULT_OUTPUT_FORMAT = 'instagram_feed'
DEFAULT_DESIGN_TEMPLATE = 'modern_gradient'
DEFAULT_COMPOSITION_STYLE = 'subject_center'
DEFAULT_TYPOGRAPHY_STYLE = 'modern_clean'
DEFAULT_COLOR_SCHEME = 'royal_blue'
DEFAULT_DIMENSIONS = {'width': 1080, 'height': 1080}


def _names(en, ar, fr):
    return {'en': en, 'ar': ar, 'fr': fr}


DESIGN_TEMPLATES = {
    'fitness_energy': {
        'id': 'fitness_energy',
        'name': _names('Fitness Energy', 'طاقة رياضية', 'Énergie Fitness'),
        'preview': '💪',
        'category': 'sports',
        'description': _names(
            'Bold, dynamic gym/fitness style with geometric shapes',
            'أسلوب رياضي جريء مع أشكال هندسية',
            'Style gym/fitness audacieux avec formes géométriques',
        ),
        'prompt': (
            'Dynamic high-energy fitness marketing poster design. Bold diagonal composition with subject '
            'appearing to break through the frame boundaries. Dramatic high-contrast lighting creating powerful '
            'shadows on the subject. Floating 3D geometric cubes and shapes in vibrant neon brand colors '
            'scattered dynamically around the composition. Torn paper grunge texture effect at the bottom edge '
            'creating urban street art feel. Motion blur energy lines and light streaks radiating outward from '
            'the center. Industrial gym aesthetic with concrete texture hints. Professional sports advertising '
            'quality.'
        ),
        'color_suggestion': {'primary': '#00FF66', 'secondary': '#1A1A2E', 'accent': '#FFFFFF'},
        'decorative_suggestions': ['geometric_3d', 'grunge_texture', 'abstract_lines'],
        'composition_suggestion': 'subject_breaking',
    },
    'modern_gradient': {
        'id': 'modern_gradient',
        'name': _names('Modern Gradient', 'تدرج حديث', 'Dégradé Moderne'),
        'preview': '🔵',
        'category': 'corporate',
        'description': _names(
            'Clean modern look with smooth gradient overlays',
            'مظهر عصري نظيف مع تدرجات ناعمة',
            'Look moderne et épuré avec dégradés fluides',
        ),
        'prompt': (
            'Modern sophisticated marketing poster with smooth flowing gradient overlays. Blue to purple '
            'gradient wave sweeping elegantly across the bottom third of the composition. Subject positioned on '
            'left side with clean professional studio lighting creating soft shadows. Large clean white negative '
            'space area on right side perfect for text placement. Geometric corner accent shapes in translucent '
            'brand colors. Subtle triangular and circular decorative elements floating with soft drop shadows. '
            'Professional minimalist aesthetic. Clean crisp edges throughout. Corporate advertising quality.'
        ),
        'color_suggestion': {'primary': '#4A3AFF', 'secondary': '#FFFFFF', 'accent': '#7C3AED'},
        'decorative_suggestions': ['gradient_waves', 'geometric_3d'],
        'composition_suggestion': 'subject_left',
    },
    'luxury_dark': {
        'id': 'luxury_dark',
        'name': _names('Luxury Dark', 'فخامة داكنة', 'Luxe Sombre'),
        'preview': '⬛',
        'category': 'luxury',
        'description': _names(
            'Premium dark aesthetic with gold accents',
            'جمالية داكنة فاخرة مع لمسات ذهبية',
            'Esthétique sombre premium avec accents dorés',
        ),
        'prompt': (
            'Premium luxury marketing poster on deep rich black velvet background. Dramatic spotlight '
            'illumination creating a hero glow effect around the product. Elegant thin golden decorative lines, '
            'borders and geometric frame accents. Subtle champagne gold particle dust floating in the light. '
            'Sophisticated high-end brand aesthetic. Subtle marble or silk texture overlay adding depth. Art deco '
            'inspired geometric patterns in corners. Dramatic rim lighting highlighting product edges. Luxury '
            'cosmetics or jewelry advertising quality. Ultra premium feel.'
        ),
        'color_suggestion': {'primary': '#D4AF37', 'secondary': '#0A0A0A', 'accent': '#FFFFFF'},
        'decorative_suggestions': ['neon_glow', 'abstract_lines'],
        'composition_suggestion': 'subject_center',
    },
    'playful_pop': {
        'id': 'playful_pop',
        'name': _names('Playful Pop', 'مرح ملون', 'Pop Ludique'),
        'preview': '🌈',
        'category': 'fun',
        'description': _names(
            'Fun colorful style with confetti and geometric shapes',
            'أسلوب ممتع وملون مع قصاصات ورقية',
            'Style fun et coloré avec confettis',
        ),
        'prompt': (
            'Fun playful vibrant marketing poster with energetic colorful aesthetic. Memphis design pattern '
            'inspired elements floating throughout. Colorful confetti pieces and geometric shapes (circles, '
            'triangles, squiggles) scattered joyfully. Wavy colorful lines and playful brush strokes adding '
            'movement. Bright candy-like saturated color palette. Cartoon-style drop shadows on elements. Rounded '
            'friendly bubble shapes as decorative accents. Cheerful and approachable feel. Kids or casual brand '
            'advertising quality. Celebratory party atmosphere.'
        ),
        'color_suggestion': {'primary': '#FF69B4', 'secondary': '#FFFFFF', 'accent': '#44D7B6'},
        'decorative_suggestions': ['confetti', 'gradient_waves'],
        'composition_suggestion': 'subject_center',
    },
    'tech_futuristic': {
        'id': 'tech_futuristic',
        'name': _names('Tech Futuristic', 'تقني مستقبلي', 'Tech Futuriste'),
        'preview': '🔮',
        'category': 'technology',
        'description': _names(
            'Sci-fi tech aesthetic with holographic effects',
            'جمالية تقنية مستقبلية مع تأثيرات هولوغرام',
            'Esthétique tech sci-fi avec effets holographiques',
        ),
        'prompt': (
            'Futuristic high-tech marketing poster design. Dark navy to black background with vibrant cyan and '
            'purple neon glow effects. Holographic light streaks, lens flares and anamorphic light leaks. Digital '
            'circuit board patterns and flowing data stream lines. Glowing UI elements and HUD-style tech '
            'decorations. Metallic chrome reflections on the product surface. Hexagonal grid pattern overlay with '
            'subtle transparency. Cyberpunk aesthetic. Technology product or gaming advertising quality. Science '
            'fiction atmosphere.'
        ),
        'color_suggestion': {'primary': '#00FFFF', 'secondary': '#0A0A2E', 'accent': '#FF00FF'},
        'decorative_suggestions': ['neon_glow', 'abstract_lines', 'halftone_dots'],
        'composition_suggestion': 'subject_center',
    },
    'organic_natural': {
        'id': 'organic_natural',
        'name': _names('Organic Natural', 'طبيعي عضوي', 'Naturel Organique'),
        'preview': '🌿',
        'category': 'wellness',
        'description': _names(
            'Nature-inspired with botanical elements',
            'مستوحى من الطبيعة مع عناصر نباتية',
            'Inspiré de la nature avec éléments botaniques',
        ),
        'prompt': (
            'Organic natural wellness marketing poster design. Soft warm earth tone color palette with cream, '
            'sage green and terracotta. Elegant botanical leaf illustrations creating a natural decorative frame '
            'around composition. Hand-drawn organic flowing line elements. Kraft paper or natural linen texture '
            'background adding warmth. Delicate watercolor splash accents in muted tones. Soft natural daylight '
            'creating gentle shadows. Sustainable eco-friendly aesthetic. Wellness, skincare or organic food '
            'advertising quality. Calming and pure atmosphere.'
        ),
        'color_suggestion': {'primary': '#4A7C59', 'secondary': '#F5F0E6', 'accent': '#8B5E3C'},
        'decorative_suggestions': ['botanical', 'abstract_lines'],
        'composition_suggestion': 'subject_left',
    },
    'bold_sale': {
        'id': 'bold_sale',
        'name': _names('Bold Sale', 'تخفيضات جريئة', 'Soldes Audacieuses'),
        'preview': '🏷️',
        'category': 'retail',
        'description': _names(
            'Eye-catching promotional sale design',
            'تصميم ترويجي جذاب للتخفيضات',
            'Design promotionnel accrocheur',
        ),
        'prompt': (
            'Bold attention-grabbing sale promotional poster design. High contrast red and yellow vibrant color '
            'scheme creating urgency. Starburst explosion effect radiating from center. Bold diagonal stripes and '
            'dynamic zigzag patterns. Price tag and badge shapes as decorative elements. Confetti and excitement '
            'particles. Retail store advertising aesthetic. Flash sale urgency feel. Black Friday or clearance '
            'sale style. Maximum visual impact and energy.'
        ),
        'color_suggestion': {'primary': '#FF0000', 'secondary': '#FFFF00', 'accent': '#000000'},
        'decorative_suggestions': ['confetti', 'abstract_lines'],
        'composition_suggestion': 'subject_center',
    },
    'minimal_elegant': {
        'id': 'minimal_elegant',
        'name': _names('Minimal Elegant', 'أنيق بسيط', 'Élégant Minimaliste'),
        'preview': '⬜',
        'category': 'luxury',
        'description': _names(
            'Ultra-clean minimal high-end aesthetic',
            'جمالية بسيطة وراقية للغاية',
            'Esthétique haut de gamme ultra-épurée',
        ),
        'prompt': (
            'Ultra-minimal elegant marketing poster design. Pure clean white or soft grey background with maximum '
            'negative space. Product perfectly centered with precise studio lighting and soft shadows. Very '
            'subtle thin line geometric accents. Refined sophisticated minimal aesthetic. High-end fashion or '
            'luxury brand feel. Scandinavian design influence. Less is more philosophy. Perfect for premium '
            'product showcase. Editorial magazine advertising quality.'
        ),
        'color_suggestion': {'primary': '#1A1A1A', 'secondary': '#FFFFFF', 'accent': '#C0C0C0'},
        'decorative_suggestions': ['none'],
        'composition_suggestion': 'subject_center',
    },
}

DECORATIVE_ELEMENTS = {
    'geometric_3d': {
        'id': 'geometric_3d',
        'name': _names('Floating 3D Shapes', 'أشكال ثلاثية الأبعاد', 'Formes 3D Flottantes'),
        'icon': '🔷',
        'prompt': (
            'Add floating 3D geometric shapes (cubes, spheres, pyramids, dodecahedrons) in the brand colors with '
            'realistic soft shadows and subtle reflections, scattered dynamically around the composition at '
            'various depths creating parallax effect'
        ),
    },
    'abstract_lines': {
        'id': 'abstract_lines',
        'name': _names('Dynamic Lines', 'خطوط ديناميكية', 'Lignes Dynamiques'),
        'icon': '〰️',
        'prompt': (
            'Add dynamic swooping curved lines and straight diagonal lines creating energy, movement and flow, '
            'radiating outward from the product, speed lines and motion trails in brand colors'
        ),
    },
    'grunge_texture': {
        'id': 'grunge_texture',
        'name': _names('Grunge Texture', 'نسيج خشن', 'Texture Grunge'),
        'icon': '🎨',
        'prompt': (
            'Add distressed grunge texture overlay, torn ripped paper edges, paint splatter marks, urban street '
            'art spray paint aesthetic, worn vintage distressed feel'
        ),
    },
    'confetti': {
        'id': 'confetti',
        'name': _names('Confetti & Celebration', 'قصاصات احتفالية', 'Confettis & Célébration'),
        'icon': '🎊',
        'prompt': (
            'Add scattered colorful confetti pieces, sparkling glitter particles, celebration streamers, party '
            'atmosphere elements floating joyfully throughout the composition'
        ),
    },
    'botanical': {
        'id': 'botanical',
        'name': _names('Botanical Leaves', 'أوراق نباتية', 'Feuilles Botaniques'),
        'icon': '🌿',
        'prompt': (
            'Add elegant botanical leaf illustrations (monstera, eucalyptus, palm fronds, ferns) creating a '
            'natural decorative frame around the edges of the composition, tropical or minimalist botanical style'
        ),
    },
    'neon_glow': {
        'id': 'neon_glow',
        'name': _names('Neon Glow Effects', 'تأثيرات نيون متوهجة', 'Effets Néon Lumineux'),
        'icon': '✨',
        'prompt': (
            'Add vibrant glowing neon light effects, colorful light trails and streaks, dramatic lens flares, '
            'cyberpunk neon glow halos, atmospheric light fog, anamorphic light leaks'
        ),
    },
    'gradient_waves': {
        'id': 'gradient_waves',
        'name': _names('Gradient Waves', 'موجات متدرجة', 'Vagues Dégradées'),
        'icon': '🌊',
        'prompt': (
            'Add smooth flowing gradient wave shapes, organic liquid blob forms, fluid abstract shapes with '
            'beautiful color gradients transitioning across the design creating depth and movement'
        ),
    },
    'halftone_dots': {
        'id': 'halftone_dots',
        'name': _names('Halftone Pattern', 'نمط نقطي', 'Motif Demi-teinte'),
        'icon': '⚫',
        'prompt': (
            'Add retro halftone dot pattern overlay, classic comic book style print effect, Ben-Day dots, '
            'newspaper print texture, pop art aesthetic'
        ),
    },
    'sparkles': {
        'id': 'sparkles',
        'name': _names('Sparkles & Stars', 'بريق ونجوم', 'Étincelles & Étoiles'),
        'icon': '⭐',
        'prompt': (
            'Add twinkling sparkle effects, shimmering star shapes, magical fairy dust particles, glamorous '
            'glitter highlights catching the light, premium quality indicators'
        ),
    },
    'smoke_mist': {
        'id': 'smoke_mist',
        'name': _names('Smoke & Mist', 'دخان وضباب', 'Fumée & Brume'),
        'icon': '💨',
        'prompt': (
            'Add atmospheric smoke wisps, mysterious fog and mist effects, ethereal vapor clouds, dramatic haze '
            'creating depth and mood, cinematic atmosphere'
        ),
    },
    'none': {
        'id': 'none',
        'name': _names('No Extra Elements', 'بدون عناصر إضافية', "Pas d'éléments"),
        'icon': '➖',
        'prompt': '',
    },
}

COMPOSITION_STYLES = {
    'subject_left': {
        'id': 'subject_left',
        'name': _names('Subject Left, Text Right', 'المنتج يسار، النص يمين', 'Sujet Gauche, Texte Droite'),
        'icon': '◀️',
        'diagram': '[ PRODUCT |        TEXT AREA        ]',
        'prompt': (
            'Composition with subject/product prominently positioned on the left third of the frame, facing '
            'right. Large open clean negative space area on the right side reserved for headline text, '
            'subheadline, and call-to-action. Diagonal energy flowing from bottom-left to top-right. Rule of '
            'thirds alignment.'
        ),
    },
    'subject_right': {
        'id': 'subject_right',
        'name': _names('Subject Right, Text Left', 'المنتج يمين، النص يسار', 'Sujet Droite, Texte Gauche'),
        'icon': '▶️',
        'diagram': '[        TEXT AREA        | PRODUCT ]',
        'prompt': (
            'Composition with subject/product prominently positioned on the right third of the frame, facing '
            'left. Large open clean negative space area on the left side reserved for headline text, '
            'subheadline, and call-to-action. Flow from right to left.'
        ),
    },
    'subject_center': {
        'id': 'subject_center',
        'name': _names('Subject Center, Text Around', 'المنتج في المنتصف', 'Sujet Centré'),
        'icon': '⏺️',
        'diagram': '[    TEXT    | PRODUCT |    TEXT    ]',
        'prompt': (
            'Composition with subject/product perfectly centered as the hero focal point. Text zones arranged '
            'symmetrically around the product - headline area at top, supporting text and CTA at bottom. Radial '
            'balance with energy emanating from the center. Spotlight focus on product.'
        ),
    },
    'subject_breaking': {
        'id': 'subject_breaking',
        'name': _names('Subject Breaking Frame', 'المنتج يتجاوز الإطار', 'Sujet Dépassant le Cadre'),
        'icon': '💥',
        'diagram': '[ PRODUCT EXTENDS BEYOND EDGES >> ]',
        'prompt': (
            'Dynamic composition where the subject/product dramatically extends beyond the frame boundaries, '
            'appearing to pop out of the design with 3D depth and parallax effect. Creates powerful visual '
            'impact and energy. Parts of the subject cropped by frame edges intentionally. Maximum drama and '
            'movement.'
        ),
    },
    'diagonal_split': {
        'id': 'diagonal_split',
        'name': _names('Diagonal Split', 'تقسيم قطري', 'Division Diagonale'),
        'icon': '📐',
        'diagram': '[ COLOR1 / PRODUCT / COLOR2 ]',
        'prompt': (
            'Composition split diagonally into two distinct color zones creating dynamic modern feel. Product '
            'positioned at the intersection of the diagonal split. One side darker, one side lighter. Strong '
            'visual tension and contemporary design aesthetic. Diagonal line from corner to corner dividing the '
            'layout.'
        ),
    },
    'full_bleed': {
        'id': 'full_bleed',
        'name': _names('Full Bleed Hero', 'صورة كاملة', 'Héros Plein Cadre'),
        'icon': '🖼️',
        'diagram': '[ PRODUCT FILLS ENTIRE FRAME ]',
        'prompt': (
            'Full bleed hero composition where the subject/product fills most of the frame at large scale. Bold '
            'and immersive. Text overlay areas created using semi-transparent backdrop strips, gradient overlays, '
            'or solid color blocks to ensure text readability. Magazine cover style.'
        ),
    },
    'layered_depth': {
        'id': 'layered_depth',
        'name': _names('Layered Depth', 'طبقات متعددة', 'Profondeur en Couches'),
        'icon': '📚',
        'diagram': '[ BG << MID << PRODUCT << FORE ]',
        'prompt': (
            'Multi-layered composition with clear foreground, midground and background layers creating '
            'cinematic depth. Product in sharp focus in the midground. Blurred or decorative elements in '
            'foreground partially overlapping. Atmospheric background with bokeh or gradient. Parallax depth '
            'effect.'
        ),
    },
}

TYPOGRAPHY_STYLES = {
    'bold_impact': {
        'id': 'bold_impact',
        'name': _names('Bold Impact', 'تأثير جريء', 'Impact Gras'),
        'icon': '🔤',
        'description': _names(
            'Maximum visual impact, sports/fitness style', 'تأثير بصري أقصى', 'Impact visuel maximum'
        ),
        'prompt': (
            'Design space for extra bold condensed heavy-weight sans-serif typography with maximum visual '
            'impact. All caps headline area. Extremely thick letter strokes. Italicized energetic feel. Sports '
            'advertising poster typography style.'
        ),
    },
    'modern_clean': {
        'id': 'modern_clean',
        'name': _names('Modern Clean', 'عصري نظيف', 'Moderne Épuré'),
        'icon': '✨',
        'description': _names('Corporate professional clean look', 'مظهر مهني نظيف', 'Look professionnel épuré'),
        'prompt': (
            'Design space for clean modern geometric sans-serif typography. Clear visual hierarchy with good '
            'contrast. Professional corporate feel. Medium weight balanced typeface. Tech company or startup '
            'aesthetic.'
        ),
    },
    'elegant_serif': {
        'id': 'elegant_serif',
        'name': _names('Elegant Serif', 'أنيق كلاسيكي', 'Serif Élégant'),
        'icon': '👑',
        'description': _names(
            'Luxury brand sophisticated feel', 'شعور فاخر ومتطور', 'Sensation luxueuse sophistiquée'
        ),
        'prompt': (
            'Design space for sophisticated elegant serif typography. Classic timeless luxury brand feel. Refined '
            'thin hairline serifs. Fashion magazine or high-end cosmetics aesthetic. Uppercase headline with '
            'refined letter-spacing.'
        ),
    },
    'playful_rounded': {
        'id': 'playful_rounded',
        'name': _names('Playful Rounded', 'مرح ومستدير', 'Ludique Arrondi'),
        'icon': '🎈',
        'description': _names('Fun friendly approachable style', 'أسلوب ممتع وودود', 'Style fun et accessible'),
        'prompt': (
            'Design space for friendly rounded bubbly typography. Approachable and fun aesthetic. Soft rounded '
            'letter corners. Kids brand or casual food product feel. Cheerful and inviting personality.'
        ),
    },
    'tech_geometric': {
        'id': 'tech_geometric',
        'name': _names('Tech Geometric', 'تقني هندسي', 'Tech Géométrique'),
        'icon': '🔷',
        'description': _names('Futuristic angular digital style', 'أسلوب رقمي مستقبلي', 'Style digital futuriste'),
        'prompt': (
            'Design space for futuristic geometric angular typography. Sharp precise edges and exact proportions. '
            'Tech startup or gaming aesthetic. Digital display font style. Monospace or extended character widths.'
        ),
    },
    'handwritten_script': {
        'id': 'handwritten_script',
        'name': _names('Handwritten Script', 'خط يدوي', 'Script Manuscrit'),
        'icon': '✍️',
        'description': _names(
            'Personal authentic artisan feel', 'شعور شخصي وحرفي', 'Sensation personnelle artisanale'
        ),
        'prompt': (
            'Design space for organic handwritten script typography. Personal authentic artisan feel. Brush '
            'lettering or calligraphy style accent text. Coffee shop or handmade product aesthetic. Secondary '
            'headline in flowing script.'
        ),
    },
}


def _scheme(id, name, icon, primary, secondary, accent, industries):
    return {
        'id': id,
        'name': name,
        'icon': icon,
        'colors': {'primary': primary, 'secondary': secondary, 'accent': accent},
        'industries': industries,
    }


COLOR_SCHEMES = {
    'custom': {
        'id': 'custom',
        'name': _names('Custom Colors', 'ألوان مخصصة', 'Couleurs Personnalisées'),
        'icon': '🎨',
        'colors': None,
        'industries': [],
    },
    'energetic_green': _scheme(
        'energetic_green', _names('Energetic Green', 'أخضر نشط', 'Vert Énergique'), '💚',
        '#00FF66', '#1A1A2E', '#FFFFFF', ['fitness', 'health', 'sports'],
    ),
    'royal_blue': _scheme(
        'royal_blue', _names('Royal Blue', 'أزرق ملكي', 'Bleu Royal'), '💙',
        '#4A3AFF', '#FFFFFF', '#7C3AED', ['corporate', 'tech', 'finance'],
    ),
    'sunset_orange': _scheme(
        'sunset_orange', _names('Sunset Orange', 'برتقالي غروب', 'Orange Coucher de Soleil'), '🧡',
        '#FF6B35', '#1A0A2E', '#FFD93D', ['food', 'travel', 'entertainment'],
    ),
    'nature_green': _scheme(
        'nature_green', _names('Nature Green', 'أخضر طبيعي', 'Vert Nature'), '🌿',
        '#4A7C59', '#F5F0E6', '#8B5E3C', ['organic', 'wellness', 'eco'],
    ),
    'luxury_gold': _scheme(
        'luxury_gold', _names('Luxury Gold', 'ذهبي فاخر', 'Or Luxueux'), '💛',
        '#D4AF37', '#0A0A0A', '#FFFFFF', ['luxury', 'jewelry', 'premium'],
    ),
    'candy_pink': _scheme(
        'candy_pink', _names('Candy Pink', 'وردي حلوى', 'Rose Bonbon'), '💖',
        '#FF69B4', '#FFFFFF', '#44D7B6', ['beauty', 'fashion', 'kids'],
    ),
    'ocean_blue': _scheme(
        'ocean_blue', _names('Ocean Blue', 'أزرق محيطي', 'Bleu Océan'), '🌊',
        '#0077B6', '#CAF0F8', '#03045E', ['travel', 'spa', 'water'],
    ),
    'fire_red': _scheme(
        'fire_red', _names('Fire Red', 'أحمر ناري', 'Rouge Feu'), '❤️',
        '#E63946', '#F1FAEE', '#1D3557', ['food', 'sale', 'urgent'],
    ),
    'midnight_purple': _scheme(
        'midnight_purple', _names('Midnight Purple', 'بنفسجي منتصف الليل', 'Violet Minuit'), '💜',
        '#7B2CBF', '#10002B', '#E0AAFF', ['gaming', 'tech', 'music'],
    ),
    'earthy_terracotta': _scheme(
        'earthy_terracotta', _names('Earthy Terracotta', 'تيراكوتا ترابي', 'Terre Cuite'), '🤎',
        '#BC6C25', '#FEFAE0', '#283618', ['home', 'craft', 'organic'],
    ),
}


def _format(id, name, icon, aspect_ratio, width, height, platform, description):
    return {
        'id': id,
        'name': name,
        'icon': icon,
        'aspect_ratio': aspect_ratio,
        'dimensions': {'width': width, 'height': height},
        'platform': platform,
        'description': description,
    }


OUTPUT_FORMATS = {
    'instagram_feed': _format(
        'instagram_feed', _names('Instagram Feed', 'منشور انستغرام', 'Feed Instagram'), '📸',
        '1:1', 1080, 1080, 'Instagram', _names('Square post for Instagram feed', 'منشور مربع', 'Post carré'),
    ),
    'instagram_story': _format(
        'instagram_story', _names('Instagram Story/Reels', 'ستوري انستغرام', 'Story Instagram'), '📱',
        '9:16', 1080, 1920, 'Instagram',
        _names('Vertical format for Stories & Reels', 'تنسيق عمودي للستوري', 'Format vertical'),
    ),
    'facebook_feed': _format(
        'facebook_feed', _names('Facebook Feed', 'منشور فيسبوك', 'Feed Facebook'), '📘',
        '1:1', 1080, 1080, 'Facebook',
        _names('Square post for Facebook', 'منشور فيسبوك مربع', 'Post Facebook carré'),
    ),
    'facebook_cover': _format(
        'facebook_cover', _names('Facebook Cover', 'غلاف فيسبوك', 'Couverture Facebook'), '🖼️',
        '820:312', 820, 312, 'Facebook',
        _names('Page cover photo', 'صورة غلاف الصفحة', 'Photo de couverture'),
    ),
    'website_hero': _format(
        'website_hero', _names('Website Hero', 'بانر الموقع', 'Bannière Site Web'), '🖥️',
        '16:9', 1920, 1080, 'Web', _names('Full-width website banner', 'بانر موقع عريض', 'Bannière large'),
    ),
    'twitter_post': _format(
        'twitter_post', _names('Twitter/X Post', 'منشور تويتر', 'Post Twitter/X'), '🐦',
        '16:9', 1600, 900, 'Twitter',
        _names('Optimal for Twitter timeline', 'مثالي لتويتر', 'Optimal pour Twitter'),
    ),
    'linkedin_post': _format(
        'linkedin_post', _names('LinkedIn Post', 'منشور لينكدإن', 'Post LinkedIn'), '💼',
        '1.91:1', 1200, 628, 'LinkedIn',
        _names('Professional network post', 'منشور مهني', 'Post professionnel'),
    ),
    'pinterest_pin': _format(
        'pinterest_pin', _names('Pinterest Pin', 'دبوس بنترست', 'Pin Pinterest'), '📌',
        '2:3', 1000, 1500, 'Pinterest', _names('Tall pin format', 'تنسيق طويل', 'Format épingle'),
    ),
}

PRODUCT_CATEGORIES = {
    'supplements': {
        'id': 'supplements',
        'name': _names('Supplements & Protein', 'مكملات وبروتين', 'Suppléments & Protéines'),
        'icon': '💪',
        'suggested_templates': ['fitness_energy', 'bold_sale'],
        'prompt_hints': 'fitness supplement protein powder bottle jar container with nutrition label',
    },
    'cosmetics': {
        'id': 'cosmetics',
        'name': _names('Cosmetics & Beauty', 'مستحضرات التجميل', 'Cosmétiques & Beauté'),
        'icon': '💄',
        'suggested_templates': ['luxury_dark', 'minimal_elegant', 'organic_natural'],
        'prompt_hints': 'cosmetic beauty skincare makeup product bottle cream serum lipstick',
    },
    'food_beverage': {
        'id': 'food_beverage',
        'name': _names('Food & Beverages', 'طعام ومشروبات', 'Alimentation & Boissons'),
        'icon': '🍕',
        'suggested_templates': ['playful_pop', 'organic_natural', 'bold_sale'],
        'prompt_hints': 'food product beverage drink snack fresh delicious appetizing',
    },
    'electronics': {
        'id': 'electronics',
        'name': _names('Electronics & Tech', 'إلكترونيات وتقنية', 'Électronique & Tech'),
        'icon': '📱',
        'suggested_templates': ['tech_futuristic', 'modern_gradient', 'minimal_elegant'],
        'prompt_hints': 'electronic device gadget technology product sleek modern',
    },
    'fashion': {
        'id': 'fashion',
        'name': _names('Fashion & Apparel', 'أزياء وملابس', 'Mode & Vêtements'),
        'icon': '👗',
        'suggested_templates': ['minimal_elegant', 'modern_gradient', 'luxury_dark'],
        'prompt_hints': 'fashion clothing apparel garment stylish trendy',
    },
    'home_decor': {
        'id': 'home_decor',
        'name': _names('Home & Decor', 'منزل وديكور', 'Maison & Déco'),
        'icon': '🏠',
        'suggested_templates': ['organic_natural', 'minimal_elegant', 'modern_gradient'],
        'prompt_hints': 'home decor furniture interior design household item',
    },
    'fitness_sports': {
        'id': 'fitness_sports',
        'name': _names('Fitness & Sports', 'لياقة ورياضة', 'Fitness & Sport'),
        'icon': '🏋️',
        'suggested_templates': ['fitness_energy', 'bold_sale'],
        'prompt_hints': 'fitness sports equipment gym gear athletic',
    },
    'jewelry': {
        'id': 'jewelry',
        'name': _names('Jewelry & Watches', 'مجوهرات وساعات', 'Bijoux & Montres'),
        'icon': '💎',
        'suggested_templates': ['luxury_dark', 'minimal_elegant'],
        'prompt_hints': 'luxury jewelry precious gem diamond gold silver watch',
    },
    'services': {
        'id': 'services',
        'name': _names('Services & Apps', 'خدمات وتطبيقات', 'Services & Apps'),
        'icon': '📲',
        'suggested_templates': ['modern_gradient', 'tech_futuristic'],
        'prompt_hints': 'service app digital platform software',
    },
    'other': {
        'id': 'other',
        'name': _names('Other', 'أخرى', 'Autre'),
        'icon': '📦',
        'suggested_templates': ['modern_gradient', 'bold_sale'],
        'prompt_hints': 'product item',
    },
}

# Studio image style that best matches each poster template
TEMPLATE_IMAGE_STYLES = {
    'fitness_energy': 'tiktok_dynamic',
    'modern_gradient': 'ecommerce_soft',
    'luxury_dark': 'luxury_dark',
    'playful_pop': 'ecommerce_bright',
    'tech_futuristic': 'luxury_dark',
    'organic_natural': 'ecommerce_soft',
    'bold_sale': 'tiktok_dynamic',
    'minimal_elegant': 'ecommerce_clean',
}

OPENING = (
    'Create a stunning professional marketing poster design.\n'
    'This should look like a premium template from Freepik or Envato.\n'
    'Ultra high quality, 8K resolution, professional advertising photography.'
)
DEFAULT_TEXT_ZONES = (
    'TEXT ZONES:\n'
    'Leave clean negative space areas suitable for headline, subheadline, and call-to-action text overlay.\n'
    'Do NOT render any text in the image - keep areas clean for post-production text addition.'
)
TEXT_ZONE_TEMPLATES = {
    'headline': '- Large prominent HEADLINE zone for: "{}" (most important, largest text area)',
    'subheadline': '- SUBHEADLINE zone below headline for: "{}" (supporting text)',
    'offer': '- OFFER BADGE zone for: "{}" (eye-catching badge or sticker shape)',
    'cta': '- CTA BUTTON zone for: "{}" (action button shape at bottom)',
    'contact': '- CONTACT INFO zone for: "{}" (small footer area)',
}
QUALITY_REQUIREMENTS = (
    'ESSENTIAL QUALITY REQUIREMENTS:\n'
    '- Professional advertising photography quality\n'
    '- Ultra sharp, crisp edges on all elements\n'
    '- Perfect lighting with professional shadows\n'
    '- Clean separation between design elements\n'
    '- Print-ready color accuracy and vibrancy\n'
    '- Product must be perfectly preserved and recognizable\n'
    '- Social media advertising ready\n'
    '- Magazine quality finish\n'
    '\n'
    'STRICTLY AVOID:\n'
    '- Any rendered text, letters, numbers, or words\n'
    '- Blurry or low-quality elements\n'
    '- Amateur or clip-art looking graphics\n'
    '- Cluttered or unbalanced composition\n'
    '- Watermarks or stock photo artifacts\n'
    '- Distorted or altered product appearance\n'
    '- Muddy colors or poor contrast\n'
    '- Generic or boring layouts'
)


def get_ad_creative_presets():
    """Preset lists for the ad creative form of the studio"""
    return {
        'designTemplates': list(DESIGN_TEMPLATES.values()),
        'decorativeElements': list(DECORATIVE_ELEMENTS.values()),
        'compositionStyles': list(COMPOSITION_STYLES.values()),
        'typographyStyles': list(TYPOGRAPHY_STYLES.values()),
        'colorSchemes': list(COLOR_SCHEMES.values()),
        'outputFormats': list(OUTPUT_FORMATS.values()),
        'productCategories': list(PRODUCT_CATEGORIES.values()),
    }


def _check_choice(errors, value, choices, label):
    if value and (not isinstance(value, str) or value not in choices):
        errors.append(f'Invalid {label}: {value}')


def validate_ad_creative_options(options):
    """
    Check ad creative options before any credit or provider call.

    Returns a list of error messages; an empty list means the options
    are usable.
    """
    errors = []
    if not options.get('product_category'):
        errors.append('Product category is required')
    if not options.get('output_format'):
        errors.append('Output format is required')

    _check_choice(errors, options.get('product_category'), PRODUCT_CATEGORIES, 'product category')
    _check_choice(errors, options.get('output_format'), OUTPUT_FORMATS, 'output format')
    _check_choice(errors, options.get('design_template'), DESIGN_TEMPLATES, 'design template')
    _check_choice(errors, options.get('composition_style'), COMPOSITION_STYLES, 'composition style')
    _check_choice(errors, options.get('typography_style'), TYPOGRAPHY_STYLES, 'typography style')
    _check_choice(errors, options.get('color_scheme'), COLOR_SCHEMES, 'color scheme')

    decorative = options.get('decorative_elements')
    if decorative is not None and not isinstance(decorative, list):
        errors.append('Decorative elements must be a list')
    else:
        for element_id in decorative or []:
            if not isinstance(element_id, str) or element_id not in DECORATIVE_ELEMENTS:
                errors.append(f'Invalid decorative element: {element_id}')

    custom_colors = options.get('custom_colors')
    if custom_colors is not None:
        if not isinstance(custom_colors, dict):
            errors.append('Custom colors must be an object')
        else:
            for role in COLOR_ROLES:
                value = custom_colors.get(role)
                if value and not (isinstance(value, str) and HEX_COLOR.match(value)):
                    errors.append(f'Invalid custom color format for {role}: {value}')

    text_content = options.get('text_content')
    if text_content is not None:
        if not isinstance(text_content, dict):
            errors.append('Text content must be an object')
        else:
            for zone in TEXT_ZONES:
                value = text_content.get(zone)
                if value and len(str(value)) > MAX_TEXT_LENGTH:
                    errors.append(f'{zone.capitalize()} must be {MAX_TEXT_LENGTH} characters or less')

    for field, label in (('target_audience', 'Target audience'), ('custom_instructions', 'Custom instructions')):
        value = options.get(field)
        if value and len(str(value)) > MAX_INSTRUCTIONS_LENGTH:
            errors.append(f'{label} must be {MAX_INSTRUCTIONS_LENGTH} characters or less')
    return errors


def _active_colors(color_scheme, custom_colors):
    if custom_colors:
        return custom_colors
    if color_scheme == 'custom':
        return None
    return (COLOR_SCHEMES.get(color_scheme) or {}).get('colors')


def _text_zone_section(text_content):
    zones = [
        template.format(text_content[zone])
        for zone, template in TEXT_ZONE_TEMPLATES.items()
        if text_content.get(zone)
    ]
    if not zones:
        return DEFAULT_TEXT_ZONES
    return '\n'.join([
        'TEXT PLACEMENT ZONES (leave clean readable negative space for these elements):',
        *zones,
        '',
        'IMPORTANT: Do NOT render actual text characters in the image.',
        'Instead, leave clean, well-composed negative space areas where text can be added in post-production.',
        'These zones should have good contrast for text overlay.',
    ])


def build_ad_creative_prompt(product_category=DEFAULT_PRODUCT_CATEGORY, output_format=DEFAULT_OUTPUT_FORMAT,
                             design_template=DEFAULT_DESIGN_TEMPLATE, composition_style=DEFAULT_COMPOSITION_STYLE,
                             typography_style=DEFAULT_TYPOGRAPHY_STYLE, color_scheme=DEFAULT_COLOR_SCHEME,
                             custom_colors=None, decorative_elements=None, text_content=None,
                             target_audience=None, custom_instructions=None):
    """
    Assemble the poster prompt from the chosen presets.

    Sections follow a fixed order: opening, design style, layout,
    palette, decorations, typography, text zones, product context,
    audience, extra requirements, output specs and quality rules. Unknown
    preset ids leave their section out.

    Returns a dict with prompt, format, aspect_ratio, dimensions and
    metadata.
    """
    sections = [OPENING]

    template = DESIGN_TEMPLATES.get(design_template)
    if template:
        sections.append(f"DESIGN STYLE:\n{template['prompt']}")

    composition = COMPOSITION_STYLES.get(composition_style)
    if composition:
        sections.append(f"LAYOUT & COMPOSITION:\n{composition['prompt']}")

    colors = _active_colors(color_scheme, custom_colors)
    if colors:
        sections.append('\n'.join([
            'COLOR PALETTE:',
            'Apply this color scheme throughout the design:',
            f"- PRIMARY COLOR: {colors.get('primary')} (main brand color for key elements, gradients, shapes)",
            f"- SECONDARY COLOR: {colors.get('secondary')} (backgrounds, large areas, contrast)",
            f"- ACCENT COLOR: {colors.get('accent')} (highlights, decorative elements, small details)",
            "Ensure the product's original colors are preserved - apply palette to decorative elements "
            "and background only.",
        ]))

    active_decorations = [element for element in decorative_elements or [] if element != 'none']
    decoration_prompts = [
        DECORATIVE_ELEMENTS[element]['prompt']
        for element in active_decorations
        if element in DECORATIVE_ELEMENTS and DECORATIVE_ELEMENTS[element]['prompt']
    ]
    if decoration_prompts:
        sections.append('\n'.join(['DECORATIVE ELEMENTS:', *decoration_prompts]))

    typography = TYPOGRAPHY_STYLES.get(typography_style)
    if typography:
        sections.append(f"TYPOGRAPHY STYLE:\n{typography['prompt']}")

    sections.append(_text_zone_section(text_content or {}))

    category = PRODUCT_CATEGORIES.get(product_category)
    if category:
        sections.append('\n'.join([
            'PRODUCT CONTEXT:',
            f"This is a {category['name']['en']} product.",
            f"Product hints: {category['prompt_hints']}",
            'Ensure the product is the hero of the composition.',
            "Preserve the product's original appearance, colors, and details exactly.",
        ]))

    if target_audience:
        sections.append('\n'.join([
            'TARGET AUDIENCE:',
            f'Design should appeal to: {target_audience}',
            'Adjust visual elements, energy level, and aesthetic to resonate with this demographic.',
        ]))

    if custom_instructions:
        sections.append(f'ADDITIONAL REQUIREMENTS:\n{custom_instructions}')

    output = OUTPUT_FORMATS.get(output_format)
    if output:
        dimensions = output['dimensions']
        sections.append('\n'.join([
            'OUTPUT SPECIFICATIONS:',
            f"Aspect Ratio: {output['aspect_ratio']}",
            f"Dimensions: {dimensions['width']}x{dimensions['height']}px",
            f"Platform optimized for: {output['platform']}",
            'Ensure composition works perfectly for this format.',
        ]))

    sections.append(QUALITY_REQUIREMENTS)

    return {
        'prompt': '\n\n'.join(sections),
        'format': output_format,
        'aspect_ratio': output['aspect_ratio'] if output else '1:1',
        'dimensions': dict(output['dimensions']) if output else dict(DEFAULT_DIMENSIONS),
        'metadata': {
            'designTemplate': design_template,
            'compositionStyle': composition_style,
            'typographyStyle': typography_style,
            'colorScheme': color_scheme,
            'decorativeElements': active_decorations,
            'productCategory': product_category,
            'textContent': text_content or None,
        },
    }


def get_suggested_templates(category_id):
    """Design templates suggested for a product category, in preference order"""
    category = PRODUCT_CATEGORIES.get(category_id)
    if category is None:
        return []
    return [DESIGN_TEMPLATES[t] for t in category['suggested_templates'] if t in DESIGN_TEMPLATES]


def get_category_defaults(category_id):
    """Starting form values for a product category, taken from its first suggested template"""
    category = PRODUCT_CATEGORIES.get(category_id)
    if category is None:
        return {
            'designTemplate': DEFAULT_DESIGN_TEMPLATE,
            'colorScheme': DEFAULT_COLOR_SCHEME,
            'decorativeElements': ['gradient_waves'],
        }

    template_id = (category['suggested_templates'] or [DEFAULT_DESIGN_TEMPLATE])[0]
    template = DESIGN_TEMPLATES.get(template_id) or {}
    color_suggestion = template.get('color_suggestion')
    return {
        'designTemplate': template_id,
        'colorScheme': 'custom' if color_suggestion else DEFAULT_COLOR_SCHEME,
        'customColors': dict(color_suggestion) if color_suggestion else None,
        'decorativeElements': list(template.get('decorative_suggestions') or []),
        'compositionStyle': template.get('composition_suggestion') or DEFAULT_COMPOSITION_STYLE,
    }


def image_style_for(design_template):
    return TEMPLATE_IMAGE_STYLES.get(design_template, 'ecommerce_clean')
