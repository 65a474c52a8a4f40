"""
Message tables for the Telegram bot.

English ('en') is the reference table; Tunisian ('tn') falls back to it
key by key, and an unknown key is returned as-is.
"""

DEFAULT_LANGUAGE = 'en'

MESSAGES = {
    'en': {
        'welcome': (
            "Welcome to Clothes2Model AI! 🎨\n\nYour ID: `{id}`\nCredits: {credits}\n\n"
            "⚠️ **Note**: You currently have {credits} credits. Contact the admin to request access."
        ),
        'welcome_hero_caption': (
            "👋 **Welcome to Clothes2Model AI!**\n\n"
            "Turn a simple photo of your product into a professional model shot in seconds. 📸✨"
        ),
        'ask_email_pro': "📧 Before we start, please send your email address so we can keep your account safe.",
        'invalid_email': "❌ That doesn't look like a valid email. Please try again.",
        'email_saved': "✅ Email saved!",
        'choose_language': "Choose your language / Khtar el lougha:",
        'lang_set': "Language set to English! Send a photo to start.",
        'banned_msg': "⛔ Your account has been suspended. Contact support if you think this is a mistake.",
        'credits_remaining': "You have {credits} credits remaining.",
        'photo_received': "Photo received! 📸\nFirst, choose the product category:",
        'choose_category': "What kind of product is this?",
        'choose_gender': "Who should wear it? Choose the model gender:",
        'generating': "Generating your image... This may take 10-20 seconds. ⏳",
        'insufficient_credits': "Insufficient credits. Please contact admin.",
        'session_expired': "Session expired. Please upload the photo again.",
        'result_caption': (
            "✨ **Result Ready!**\n\n🎭 **Style**: {style}\n👤 **Model**: {gender}, {ethnicity}\n💳 **Credits**: {credits}"
        ),
        'review': (
            "📝 **Review Your Order**\n\n👤 **Model:** {model}\n🏙️ **Background:** {background}\n"
            "👕 **Category:** {category}\n\nReady to generate?"
        ),
        'start_over': "Send a new photo to start over.",
        'video_offer': "🎬 Want to bring it to life? Turn this photo into a short video (1 credit).",
        'video_no_recent': "No recent photo to animate. Generate a photo first.",
        'video_in_progress': "⏳ A video is already being generated. Please wait for it to finish.",
        'video_generating': "🎬 Generating your video... This can take a few minutes. ⏳",
        'video_ready': "🎬 Your video is ready!",
        'video_failed': "❌ Video generation failed. Your credit has been refunded.",
        'video_premium_required': "⚠️ Video generation requires a premium plan on the AI service. Your credit has been refunded.",
        'admin_only': "⛔ You are not authorized. Admin only.",
        'credits_updated': "✅ Credits for {id} set to {amount}.",
        'credits_received': "🎁 Your credits have been updated: {amount}",
        'stop_success': "🛑 Session cleared. Send /start to begin again.",
        'stats': "📊 **Statistics**\n\n👥 Total Users: `{users}`\n🖼️ Total Generations: `{gens}`",
        'help': (
            "📚 **How to use**\n\n1. 📸 **Send a photo**: Send a clear photo of the clothes.\n"
            "2. 🎨 **Choose**: Pick the category, model and background.\n"
            "3. ✨ **Wait**: Your image is ready in ~15 seconds.\n\n"
            "**Commands**:\n/profile - View your profile\n/lang - Change language\n"
            "/stop - Clear the session\n/help - Show this guide"
        ),
        'profile': "👤 **Profile**\n\n🆔 ID: `{id}`\n💳 Credits: `{credits}`\n🖼️ Generations: `{gens}`",
        'gift_success': "✅ Gifted {amount} credits to user {id}.",
        'gift_received': "🎁 You received a gift of {amount} credits! Enjoy! 🎉",
        'broadcast_sent': "✅ Message sent to {count} users.",
        'ban_success': "🚫 User {id} has been banned.",
        'unban_success': "✅ User {id} has been unbanned.",
        'user_info': (
            "👤 **User Info**\n\n🆔 ID: `{id}`\n📛 Username: {username}\n💳 Credits: `{credits}`\n"
            "🖼️ Generations: `{gens}`\n⛔ Banned: {banned}"
        ),
        'support_msg': "💬 **Support**\n\nNeed help? Contact the admin and include your ID from /myid.",
        'pricing_msg': "💳 **Pricing**\n\n1 photo = 1 credit\n1 video = 1 credit\n\nContact the admin to buy credits.",
        'terms_msg': (
            "📜 **Terms**\n\nOnly upload photos you own the rights to. Generated images are for your "
            "commercial use. Credits are not refundable except for failed generations."
        ),
        'tutorial_msg': (
            "🎓 **Tutorial**\n\n1. Send a photo of your product.\n2. Choose the category and gender.\n"
            "3. Pick a model and a background.\n4. Tap Generate!"
        ),
        'progress': {
            'analyzing': "🎨 **BrandModel** is analyzing your cloth...",
            'fitting': "👗 Fitting the model...",
            'lighting': "💡 Adjusting studio lighting...",
            'rendering': "✨ Rendering final details...",
        },
        'errors': {
            'timeout': '⏱️ Generation timed out. Your credit has been refunded. Please try again!',
            'api_error': '❌ API service error. Your credit has been refunded. Please try again in a few moments.',
            'network_error': '🌐 Network connection error. Your credit has been refunded. Please try again.',
            'invalid_input': '⚠️ Invalid image or settings. Your credit has been refunded. Please upload a different photo.',
            'file_error': '📁 File processing error. Your credit has been refunded. Please try uploading again.',
            'generic': '❌ Generation failed. Your credit has been refunded. Please try again.',
        },
        'buttons': {
            'start_creating': "🚀 Start Creating",
            'tutorial': "🎓 Tutorial",
            'pricing': "💳 Pricing",
            'female': "Female 👩",
            'male': "Male 👨",
            'clothes': "Clothes 👕",
            'shoes': "Shoes 👟",
            'select': "✅ Select {name}",
            'generate': "✨ Generate Photo",
            'start_over': "🔄 Start Over",
            'animate': "🎬 Animate (1 credit)",
        },
    },
    'tn': {
        'welcome': (
            "3aslema fi Clothes2Model AI! 🎨\n\nID mte3ek: `{id}`\nSolde: {credits}\n\n"
            "⚠️ **Note**: 3andek {credits} credits tawa. Kallem l'admin bech ya3tik l'accès."
        ),
        'welcome_hero_caption': (
            "👋 **3aslema fi Clothes2Model AI!**\n\n"
            "Baddel taswira 3adiya mta3 el produit mte3ek l taswira pro m3a model fi thwani. 📸✨"
        ),
        'ask_email_pro': "📧 9bal ma nebdew, ab3athelna el email mte3ek bech n7amiw el compte.",
        'invalid_email': "❌ El email hedha mouch s7i7. 3awed jarreb.",
        'email_saved': "✅ Tsajjel el email!",
        'lang_set': "Jawwek behi! Ab3ath taswira bech nebdeou.",
        'banned_msg': "⛔ El compte mte3ek mwa99ef. Kallem el support ken fama ghalta.",
        'credits_remaining': "Mazeloulek {credits} credits.",
        'photo_received': "Weslet el taswira! 📸\nAwalan, khtar chnowa el produit:",
        'choose_category': "Chnowa el produit?",
        'choose_gender': "Chkoun bech yelbsou? Khtar el genre:",
        'generating': "Qa3ed n7adher fel taswira... Osber 10-20 thanya. ⏳",
        'insufficient_credits': "Ma 3andekch solde. Kallem l'admin.",
        'session_expired': "Wfet el session. 3awed ab3ath el taswira.",
        'result_caption': (
            "✨ **7adhret!**\n\n🎭 **Style**: {style}\n👤 **Model**: {gender}, {ethnicity}\n💳 **Solde**: {credits}"
        ),
        'start_over': "Ab3ath taswira jdida bech tebda men jdid.",
        'video_offer': "🎬 T7eb t7arrekha? Baddel el taswira l video 9sira (1 credit).",
        'video_no_recent': "Ma fammech taswira jdida bech n7arkouha. 7adher taswira 9bal.",
        'video_in_progress': "⏳ Fama video qa3da tet7adher. Osber chwaya.",
        'video_generating': "🎬 Qa3ed n7adher fel video... Tnajjem takhou chwaya d9aye9. ⏳",
        'video_ready': "🎬 El video 7adhra!",
        'video_failed': "❌ Fchelet el video. Raja3nalek el credit.",
        'admin_only': "⛔ Ma 3andekch el 7a9. Enti mouch admin.",
        'credits_updated': "✅ Tbaddel el solde mta3 {id} walla {amount}.",
        'credits_received': "🎁 El solde mte3ek walla: {amount}",
        'stop_success': "🛑 Fassakhna kol chay. Ab3ath /start bech tebda men jdid.",
        'stats': "📊 **Statistiques**\n\n👥 Total Utilisateurs: `{users}`\n🖼️ Total Tasawer: `{gens}`",
        'help': (
            "📚 **Kifech Testa3mel**\n\n1. 📸 **Ab3ath Taswira**: Ab3ath taswira wadh7a mta3 el 7wayej.\n"
            "2. 🎨 **Khtar**: Khtar el Genre, Asl, Style, Wa9fa, w Khalfiya.\n"
            "3. ✨ **Estanna**: El taswira ta7dher fi ~15 thanya.\n\n"
            "**Commandes**:\n/profile - Chouf el profil mte3ek\n/lang - Baddel el lougha\n"
            "/stop - Fassakh el session\n/help - Warri el guide hedha"
        ),
        'profile': "👤 **Profil**\n\n🆔 ID: `{id}`\n💳 Solde: `{credits}`\n🖼️ Tasawer: `{gens}`",
        'gift_success': "✅ 3tit {amount} credits lel user {id}.",
        'gift_received': "🎁 Jek cadeau {amount} credits! Sa77a! 🎉",
        'broadcast_sent': "✅ El message wsol l {count} users.",
        'errors': {
            'timeout': '⏱️ Wa9t khlas. Crédits rja3lék. 3awéd jéréb!',
            'api_error': '❌ Mochkla fil API. Crédits rja3lék. Estanna chwaya w 3awéd jéréb.',
            'network_error': '🌐 Mochkla fil connexion. Crédits rja3lék. 3awéd jéréb.',
            'invalid_input': '⚠️ Tsawira walla settings mch behin. Crédits rja3lék. 3awéd b tsawira o5ra.',
            'file_error': '📁 Mochkla fil fichier. Crédits rja3lék. 3awéd tsawér márra o5ra.',
            'generic': '❌ Fama mochkla. Crédits rja3lék. 3awéd jéréb.',
        },
        'buttons': {
            'female': "Mra 👩",
            'male': "Rajel 👨",
            'clothes': "7wayej 👕",
            'shoes': "Sabbat 👟",
            'select': "✅ Khtar {name}",
            'start_over': "🔄 3awed",
        },
    },
}


def _lookup(table, key):
    value = table
    for part in key.split('.'):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value if isinstance(value, str) else None


def t(key, lang=DEFAULT_LANGUAGE, params=None):
    """
    Translate `key` (dotted for nested tables, e.g. 'buttons.female').

    Every `{name}` placeholder found in params is substituted.
    """
    text = (
        _lookup(MESSAGES.get(lang) or {}, key)
        or _lookup(MESSAGES[DEFAULT_LANGUAGE], key)
        or key
    )
    for name, value in (params or {}).items():
        text = text.replace(f'{{{name}}}', str(value))
    return text
