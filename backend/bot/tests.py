"""
Tests for the Telegram bot: message tables, the user store, update
dispatch through the photo flow, the webhook and the Bot API client
"""
import shutil
import tempfile
from unittest.mock import MagicMock, patch

import requests
from django.core.cache import cache
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, SimpleTestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from backend.core.test_utils import TestDataFactory, make_image_bytes
from backend.studio.geminigen import GenerationError
from backend.bot import services
from backend.bot.handlers import (
    build_video_prompt, classify_error, get_state, handle_update, set_state, _recent_key, _video_job_key,
)
from backend.bot.locales import t
from backend.bot.models import BotUser
from backend.bot.telegram import TelegramClient, TelegramError, inline_keyboard

ADMIN_ID = 1000
USER_ID = 2000


def message_update(user_id, text=None, photo=None):
    message = {
        'message_id': 5,
        'from': {'id': user_id, 'username': f'user{user_id}'},
        'chat': {'id': user_id},
    }
    if text is not None:
        message['text'] = text
    if photo is not None:
        message['photo'] = photo
    return {'update_id': 1, 'message': message}


def callback_update(user_id, data, message_id=7):
    return {
        'update_id': 2,
        'callback_query': {
            'id': 'cb-1',
            'from': {'id': user_id, 'username': f'user{user_id}'},
            'data': data,
            'message': {'message_id': message_id, 'chat': {'id': user_id}},
        },
    }


def sent_texts(client):
    return [call.args[1] for call in client.send_message.call_args_list]


PHOTO_SIZES = [
    {'file_id': 'small', 'file_size': 100, 'width': 90, 'height': 90},
    {'file_id': 'large', 'file_size': 5000, 'width': 800, 'height': 800},
]


class LocaleTests(SimpleTestCase):

    def test_substitutes_params(self):
        self.assertEqual(t('credits_remaining', 'en', {'credits': 3}), 'You have 3 credits remaining.')
        self.assertEqual(t('credits_remaining', 'tn', {'credits': 3}), 'Mazeloulek 3 credits.')

    def test_every_occurrence_is_replaced(self):
        text = t('welcome', 'en', {'id': 7, 'credits': 4})
        self.assertNotIn('{credits}', text)
        self.assertEqual(text.count('4'), 2)

    def test_nested_keys(self):
        self.assertEqual(t('buttons.female', 'tn'), 'Mra 👩')
        self.assertEqual(t('buttons.female', 'en'), 'Female 👩')

    def test_falls_back_to_english_then_key(self):
        self.assertEqual(t('tutorial_msg', 'tn'), t('tutorial_msg', 'en'))
        self.assertEqual(t('buttons.animate', 'xx'), t('buttons.animate', 'en'))
        self.assertEqual(t('no_such_key', 'tn'), 'no_such_key')


class BotUserServiceTests(TestCase):

    def test_get_or_create_is_idempotent(self):
        first = services.get_or_create_user(USER_ID, 'alice')
        second = services.get_or_create_user(USER_ID, 'other')
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(second.credits, 0)
        self.assertEqual(BotUser.objects.count(), 1)

    def test_deduct_credit_counts_generation(self):
        TestDataFactory.create_bot_user(telegram_id=USER_ID, credits=2)
        user = services.deduct_credit(USER_ID)
        self.assertEqual(user.credits, 1)
        self.assertEqual(user.generations_count, 1)

    def test_deduct_credit_refuses_empty_balance(self):
        TestDataFactory.create_bot_user(telegram_id=USER_ID, credits=0)
        self.assertIsNone(services.deduct_credit(USER_ID))
        self.assertIsNone(services.deduct_credit(999))
        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).generations_count, 0)

    def test_refund_and_increment(self):
        TestDataFactory.create_bot_user(telegram_id=USER_ID, credits=1)
        self.assertEqual(services.refund_credit(USER_ID).credits, 2)
        self.assertEqual(services.increment_credits(USER_ID, 5).credits, 7)
        self.assertIsNone(services.increment_credits(999, 5))

    def test_set_credits_creates_unknown_user(self):
        user = services.set_credits(USER_ID, 12)
        self.assertEqual(user.credits, 12)

    def test_ban_and_stats(self):
        TestDataFactory.create_bot_user(telegram_id=USER_ID)
        other = TestDataFactory.create_bot_user(telegram_id=USER_ID + 1)
        other.generations_count = 4
        other.save()

        self.assertTrue(services.set_banned(USER_ID, True))
        self.assertTrue(BotUser.objects.get(telegram_id=USER_ID).is_banned)
        self.assertFalse(services.set_banned(999, True))
        self.assertEqual(services.get_stats(), {'total_users': 2, 'total_generations': 4})


class HelperTests(SimpleTestCase):

    def test_classify_error(self):
        self.assertEqual(classify_error(GenerationError('Timed out waiting for giminigen')), 'timeout')
        self.assertEqual(classify_error(GenerationError('HTTP 429 quota exceeded')), 'api_error')
        self.assertEqual(classify_error(requests.ConnectionError('refused')), 'network_error')
        self.assertEqual(classify_error(GenerationError('Unsupported image')), 'invalid_input')
        self.assertEqual(classify_error(FileNotFoundError('missing')), 'file_error')
        self.assertEqual(classify_error(GenerationError('boom')), 'generic')

    def test_video_prompt_for_clothes(self):
        prompt = build_video_prompt({
            'gender': 'female', 'ethnicity': 'tunisian', 'category': 'clothes',
            'style_label': 'Custom', 'backdrop_prompt': 'Sahara dunes.',
        })
        self.assertIn('slow 360-degree turn-in-place', prompt)
        self.assertIn('Use a female model with Tunisian / North African features.', prompt)
        self.assertIn('Style reference: Custom.', prompt)
        self.assertIn('Backdrop: Sahara dunes.', prompt)
        self.assertIn('Keep garment colors perfectly accurate', prompt)

    def test_video_prompt_for_shoes(self):
        prompt = build_video_prompt({'category': 'shoes', 'color_name': 'navy'})
        self.assertIn('360 orbit around the feet', prompt)
        self.assertIn('Lock garment color to navy', prompt)
        self.assertNotIn('Use a', prompt)

    def test_inline_keyboard(self):
        self.assertEqual(
            inline_keyboard([[('A', 'a'), ('B', 'b')]]),
            {'inline_keyboard': [[{'text': 'A', 'callback_data': 'a'}, {'text': 'B', 'callback_data': 'b'}]]},
        )


@override_settings(TELEGRAM_ADMIN_IDS=[str(ADMIN_ID)], TELEGRAM_RUN_JOBS_INLINE=True)
class BotTestCase(TestCase):

    def setUp(self):
        cache.clear()
        self.media_root = tempfile.mkdtemp()
        media_override = override_settings(MEDIA_ROOT=self.media_root, PUBLIC_BASE_URL='https://shop.test')
        media_override.enable()
        self.addCleanup(media_override.disable)
        self.addCleanup(shutil.rmtree, self.media_root, True)
        self.client_mock = MagicMock()
        self.client_mock.get_file_url.return_value = 'https://api.telegram.org/file/bottoken/photos/1.jpg'

    def dispatch(self, update):
        handle_update(update, client=self.client_mock)


class CommandTests(BotTestCase):

    def test_start_registers_user_and_sends_menu(self):
        self.dispatch(message_update(USER_ID, '/start'))

        user = BotUser.objects.get(telegram_id=USER_ID)
        self.assertEqual(user.username, f'user{USER_ID}')
        self.assertEqual(user.credits, 0)
        text = sent_texts(self.client_mock)[0]
        self.assertIn('Welcome to Clothes2Model AI', text)
        markup = self.client_mock.send_message.call_args.kwargs['reply_markup']
        self.assertEqual(markup['inline_keyboard'][0][0]['callback_data'], 'start_creating')

    def test_banned_user_gets_banned_message(self):
        TestDataFactory.create_bot_user(telegram_id=USER_ID, is_banned=True)
        self.dispatch(message_update(USER_ID, '/credits'))
        self.assertEqual(sent_texts(self.client_mock), [t('banned_msg', 'en')])

    def test_credits_and_profile_use_language(self):
        TestDataFactory.create_bot_user(telegram_id=USER_ID, credits=4, language='tn')
        self.dispatch(message_update(USER_ID, '/credits'))
        self.dispatch(message_update(USER_ID, '/profile'))
        texts = sent_texts(self.client_mock)
        self.assertEqual(texts[0], 'Mazeloulek 4 credits.')
        self.assertIn('Solde: `4`', texts[1])

    def test_myid(self):
        self.dispatch(message_update(USER_ID, '/myid'))
        self.assertEqual(sent_texts(self.client_mock), [f'Your Telegram ID is: `{USER_ID}`'])

    def test_stop_clears_state(self):
        set_state(USER_ID, {'step': 'category'})
        self.dispatch(message_update(USER_ID, '/stop'))
        self.assertIsNone(get_state(USER_ID))
        self.assertEqual(sent_texts(self.client_mock), [t('stop_success', 'en')])

    def test_unknown_command_is_ignored(self):
        self.dispatch(message_update(USER_ID, '/dance'))
        self.client_mock.send_message.assert_not_called()


class AdminCommandTests(BotTestCase):

    def test_setcredits_requires_admin(self):
        self.dispatch(message_update(USER_ID, f'/setcredits {USER_ID} 50'))
        self.assertEqual(sent_texts(self.client_mock), [t('admin_only', 'en')])
        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).credits, 0)

    def test_setcredits_usage_and_validation(self):
        self.dispatch(message_update(ADMIN_ID, '/setcredits 5'))
        self.dispatch(message_update(ADMIN_ID, '/setcredits 5 lots'))
        self.dispatch(message_update(ADMIN_ID, '/setcredits 999 5'))
        self.assertEqual(sent_texts(self.client_mock), [
            'Usage: /setcredits <user_id> <amount>',
            'Invalid amount.',
            'User not found. Ask them to /start first.',
        ])

    def test_setcredits_updates_and_notifies_target(self):
        TestDataFactory.create_bot_user(telegram_id=USER_ID, language='tn')
        self.dispatch(message_update(ADMIN_ID, f'/setcredits {USER_ID} 25'))

        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).credits, 25)
        self.client_mock.send_message.assert_any_call(USER_ID, '🎁 El solde mte3ek walla: 25')
        self.assertIn(t('credits_updated', 'en', {'id': USER_ID, 'amount': 25}), sent_texts(self.client_mock))

    def test_admin_commands_ignore_non_admins(self):
        TestDataFactory.create_bot_user(telegram_id=USER_ID + 1)
        self.dispatch(message_update(USER_ID, f'/gift {USER_ID + 1} 10'))
        self.dispatch(message_update(USER_ID, '/stats'))
        self.client_mock.send_message.assert_not_called()
        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID + 1).credits, 0)

    def test_gift_and_giftall(self):
        TestDataFactory.create_bot_user(telegram_id=USER_ID, credits=1)
        self.dispatch(message_update(ADMIN_ID, f'/gift {USER_ID} 3'))
        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).credits, 4)

        self.dispatch(message_update(ADMIN_ID, '/giftall 2'))
        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).credits, 6)
        # The admin registered on the first command and is gifted too
        self.assertIn('✅ Gifted 2 credits to 2 users.', sent_texts(self.client_mock))

    def test_broadcast_counts_delivered_messages(self):
        TestDataFactory.create_bot_user(telegram_id=USER_ID)

        def send_message(chat_id, text, **kwargs):
            if chat_id == USER_ID:
                raise TelegramError('Forbidden: bot was blocked by the user')

        self.client_mock.send_message.side_effect = send_message
        self.dispatch(message_update(ADMIN_ID, '/broadcast Sale today'))
        last_text = self.client_mock.send_message.call_args.args[1]
        self.assertEqual(last_text, t('broadcast_sent', 'en', {'count': 1}))

    def test_ban_unban_userinfo(self):
        TestDataFactory.create_bot_user(telegram_id=USER_ID, credits=3)
        self.dispatch(message_update(ADMIN_ID, f'/ban {USER_ID}'))
        self.assertTrue(BotUser.objects.get(telegram_id=USER_ID).is_banned)

        self.dispatch(message_update(ADMIN_ID, f'/userinfo {USER_ID}'))
        self.assertIn('Banned: Yes', sent_texts(self.client_mock)[-1])

        self.dispatch(message_update(ADMIN_ID, f'/unban {USER_ID}'))
        self.assertFalse(BotUser.objects.get(telegram_id=USER_ID).is_banned)

        self.dispatch(message_update(ADMIN_ID, '/ban'))
        self.assertEqual(sent_texts(self.client_mock)[-1], 'Usage: /ban <user_id>')

    def test_stats(self):
        bot_user = TestDataFactory.create_bot_user(telegram_id=USER_ID)
        bot_user.generations_count = 3
        bot_user.save()
        self.dispatch(message_update(ADMIN_ID, '/stats'))
        self.assertIn('`3`', sent_texts(self.client_mock)[-1])


class OnboardingTests(BotTestCase):

    def test_email_capture(self):
        self.dispatch(callback_update(USER_ID, 'start_creating'))
        self.assertEqual(get_state(USER_ID), {'step': 'waiting_for_email'})

        self.dispatch(message_update(USER_ID, 'not-an-email'))
        self.assertEqual(sent_texts(self.client_mock)[-1], t('invalid_email', 'en'))

        self.dispatch(message_update(USER_ID, 'shop@example.com'))
        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).email, 'shop@example.com')
        self.assertIsNone(get_state(USER_ID))
        self.assertIn(t('email_saved', 'en'), sent_texts(self.client_mock))

    def test_start_creating_with_email_shows_language_picker(self):
        TestDataFactory.create_bot_user(telegram_id=USER_ID, email='a@b.co')
        self.dispatch(callback_update(USER_ID, 'start_creating'))
        markup = self.client_mock.send_message.call_args.kwargs['reply_markup']
        self.assertEqual(markup['inline_keyboard'][0][1]['callback_data'], 'set_lang_tn')

    def test_set_language(self):
        self.dispatch(callback_update(USER_ID, 'set_lang_tn'))
        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).language, 'tn')
        self.assertEqual(sent_texts(self.client_mock), ['Jawwek behi! Ab3ath taswira bech nebdeou.'])
        self.client_mock.answer_callback_query.assert_called_with('cb-1', None)


class PhotoFlowTests(BotTestCase):

    def setUp(self):
        super().setUp()
        TestDataFactory.create_bot_user(telegram_id=USER_ID, credits=2)

    def walk_to_review(self):
        self.dispatch(message_update(USER_ID, photo=PHOTO_SIZES))
        self.dispatch(callback_update(USER_ID, 'cat_clothes'))
        self.dispatch(callback_update(USER_ID, 'gender_female'))
        self.dispatch(callback_update(USER_ID, 'model_select_asma'))
        self.dispatch(callback_update(USER_ID, 'bg_select_medina'))

    def test_photo_requires_credits(self):
        BotUser.objects.filter(telegram_id=USER_ID).update(credits=0)
        self.dispatch(message_update(USER_ID, photo=PHOTO_SIZES))
        self.assertEqual(sent_texts(self.client_mock), [t('insufficient_credits', 'en')])
        self.assertIsNone(get_state(USER_ID))

    def test_photo_keeps_largest_size(self):
        self.dispatch(message_update(USER_ID, photo=PHOTO_SIZES))
        self.assertEqual(get_state(USER_ID), {'file_id': 'large', 'step': 'category'})
        self.assertEqual(sent_texts(self.client_mock), [t('choose_category', 'en')])

    def test_callback_without_session(self):
        self.dispatch(callback_update(USER_ID, 'cat_shoes'))
        self.assertEqual(sent_texts(self.client_mock), [t('session_expired', 'en')])

    def test_model_carousel_wraps(self):
        self.dispatch(message_update(USER_ID, photo=PHOTO_SIZES))
        self.dispatch(callback_update(USER_ID, 'cat_clothes'))
        self.dispatch(callback_update(USER_ID, 'gender_male'))

        photo_call = self.client_mock.send_photo.call_args
        self.assertEqual(photo_call.args[1], 'https://shop.test/media/studio/assets/models/man-ahmed.png')
        self.assertIn('Ahmed', photo_call.kwargs['caption'])

        self.dispatch(callback_update(USER_ID, 'model_prev'))
        self.assertEqual(get_state(USER_ID)['model_index'], 5)
        self.assertIn('Mounir', self.client_mock.edit_message_media.call_args.kwargs['caption'])

        self.dispatch(callback_update(USER_ID, 'model_next'))
        self.assertEqual(get_state(USER_ID)['model_index'], 0)

    def test_shoes_use_leg_models(self):
        self.dispatch(message_update(USER_ID, photo=PHOTO_SIZES))
        self.dispatch(callback_update(USER_ID, 'cat_shoes'))
        self.dispatch(callback_update(USER_ID, 'gender_female'))
        self.assertIn('legs/female-black-jeans.png', self.client_mock.send_photo.call_args.args[1])

    def test_carousel_falls_back_to_text(self):
        self.dispatch(message_update(USER_ID, photo=PHOTO_SIZES))
        self.dispatch(callback_update(USER_ID, 'cat_clothes'))
        self.client_mock.send_photo.side_effect = TelegramError('wrong file identifier')
        self.dispatch(callback_update(USER_ID, 'gender_female'))
        self.assertIn('Asma', sent_texts(self.client_mock)[-1])

    def test_review_summarizes_choices(self):
        self.walk_to_review()
        state = get_state(USER_ID)
        self.assertEqual(state['step'], 'review')
        self.assertEqual(state['model_id'], 'asma')
        self.assertEqual(state['background_id'], 'medina')
        review = sent_texts(self.client_mock)[-1]
        self.assertIn('Asma', review)
        self.assertIn('Medina (Tunis)', review)
        self.assertIn('clothes', review)

    def test_start_over(self):
        self.walk_to_review()
        self.dispatch(callback_update(USER_ID, 'start_over'))
        self.assertIsNone(get_state(USER_ID))
        self.assertEqual(sent_texts(self.client_mock)[-1], t('start_over', 'en'))

    @patch('backend.bot.handlers.fetch_image')
    @patch('backend.bot.handlers.GeminiGenClient')
    def test_generate_photo(self, client_class, fetch_image):
        fetch_image.return_value = (make_image_bytes(), 'image/png')
        client_class.return_value.generate_image.return_value = {
            'imageUrl': 'https://cdn.test/result.png',
            'downloadUrl': 'https://cdn.test/result-full.png',
        }
        self.walk_to_review()
        self.dispatch(callback_update(USER_ID, 'generate_photo'))

        user = BotUser.objects.get(telegram_id=USER_ID)
        self.assertEqual(user.credits, 1)
        self.assertEqual(user.generations_count, 1)
        self.assertIsNone(get_state(USER_ID))

        image_path, prompt, options = client_class.return_value.generate_image.call_args.args
        self.assertIn('Traditional Tunisian Medina', prompt)
        self.assertEqual(options['category'], 'clothes')
        self.assertEqual(options['model_persona'], {'gender': 'female', 'ethnicity': 'tunisian'})
        self.assertIn('Asma', options['model_description'])
        self.assertIsNone(options['model_reference_path'])

        photo_call = self.client_mock.send_photo.call_args
        self.assertEqual(photo_call.args[1], 'https://cdn.test/result.png')
        self.assertIn('**Credits**: 1', photo_call.kwargs['caption'])
        self.assertEqual(sent_texts(self.client_mock)[-1], t('video_offer', 'en'))
        self.assertEqual(cache.get(_recent_key(USER_ID))['reference_url'], 'https://cdn.test/result-full.png')

    @patch('backend.bot.handlers.fetch_image')
    @patch('backend.bot.handlers.GeminiGenClient')
    def test_generate_photo_failure_refunds(self, client_class, fetch_image):
        fetch_image.return_value = (make_image_bytes(), 'image/png')
        client_class.return_value.generate_image.side_effect = GenerationError(
            'Timed out waiting for giminigen to finish the render'
        )
        self.walk_to_review()
        self.dispatch(callback_update(USER_ID, 'generate_photo'))

        user = BotUser.objects.get(telegram_id=USER_ID)
        self.assertEqual(user.credits, 2)
        self.assertEqual(sent_texts(self.client_mock)[-1], t('errors.timeout', 'en'))

    @patch('backend.bot.handlers.fetch_image')
    @patch('backend.bot.handlers.GeminiGenClient')
    def test_unexpected_generation_error_refunds(self, client_class, fetch_image):
        fetch_image.return_value = (make_image_bytes(), 'image/png')
        client_class.return_value.generate_image.side_effect = ValueError('unexpected payload')
        self.walk_to_review()
        self.dispatch(callback_update(USER_ID, 'generate_photo'))

        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).credits, 2)
        self.assertEqual(sent_texts(self.client_mock)[-1], t('errors.generic', 'en'))
        self.client_mock.send_photo.assert_not_called()

    @patch('backend.bot.handlers.fetch_image')
    @patch('backend.bot.handlers.GeminiGenClient')
    def test_progress_message_failure_still_delivers(self, client_class, fetch_image):
        fetch_image.return_value = (make_image_bytes(), 'image/png')
        client_class.return_value.generate_image.return_value = {'imageUrl': 'https://cdn.test/result.png'}
        self.walk_to_review()
        self.client_mock.send_photo.reset_mock()
        self.client_mock.edit_message_text.side_effect = TelegramError('message to edit not found')
        self.client_mock.send_message.side_effect = TelegramError('bot was blocked by the user')

        self.dispatch(callback_update(USER_ID, 'generate_photo'))

        client_class.return_value.generate_image.assert_called_once()
        self.assertEqual(self.client_mock.send_photo.call_args.args[1], 'https://cdn.test/result.png')
        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).credits, 1)

    def test_job_that_cannot_start_refunds(self):
        self.walk_to_review()
        with patch('backend.bot.handlers.run_job', side_effect=RuntimeError("can't start new thread")):
            self.dispatch(callback_update(USER_ID, 'generate_photo'))

        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).credits, 2)
        self.assertEqual(sent_texts(self.client_mock)[-1], t('errors.generic', 'en'))

    @patch('backend.bot.handlers.fetch_image')
    @patch('backend.bot.handlers.GeminiGenClient')
    def test_caption_without_user_record(self, client_class, fetch_image):
        fetch_image.return_value = (make_image_bytes(), 'image/png')
        client_class.return_value.generate_image.return_value = {'imageUrl': 'https://cdn.test/result.png'}
        self.walk_to_review()
        with patch.object(services, 'get_user', return_value=None):
            self.dispatch(callback_update(USER_ID, 'generate_photo'))

        self.assertIn('**Credits**: 0', self.client_mock.send_photo.call_args.kwargs['caption'])
        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).credits, 1)

    def test_generate_photo_twice_is_rejected(self):
        self.walk_to_review()
        with patch('backend.bot.handlers.run_job') as run_job:
            self.dispatch(callback_update(USER_ID, 'generate_photo'))
            self.dispatch(callback_update(USER_ID, 'generate_photo'))
        self.assertEqual(run_job.call_count, 1)
        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).credits, 1)
        self.assertEqual(sent_texts(self.client_mock)[-1], t('session_expired', 'en'))


class AnimateVideoTests(BotTestCase):

    def setUp(self):
        super().setUp()
        TestDataFactory.create_bot_user(telegram_id=USER_ID, credits=1)
        self.recent = {
            'reference_url': 'https://cdn.test/result.png',
            'gender': 'female',
            'ethnicity': 'tunisian',
            'category': 'clothes',
        }

    def test_requires_recent_result(self):
        self.dispatch(callback_update(USER_ID, 'animate_video'))
        self.assertEqual(sent_texts(self.client_mock), [t('video_no_recent', 'en')])

    def test_rejects_concurrent_job(self):
        cache.set(_recent_key(USER_ID), self.recent)
        cache.set(_video_job_key(USER_ID), True)
        self.dispatch(callback_update(USER_ID, 'animate_video'))
        self.assertEqual(sent_texts(self.client_mock), [t('video_in_progress', 'en')])
        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).credits, 1)

    def test_requires_credit(self):
        BotUser.objects.filter(telegram_id=USER_ID).update(credits=0)
        cache.set(_recent_key(USER_ID), self.recent)
        self.dispatch(callback_update(USER_ID, 'animate_video'))
        self.assertEqual(sent_texts(self.client_mock), [t('insufficient_credits', 'en')])
        self.assertIsNone(cache.get(_video_job_key(USER_ID)))

    @patch('backend.bot.handlers.GeminiGenClient')
    def test_sends_video(self, client_class):
        client_class.return_value.generate_video_from_image.return_value = {'videoUrl': 'https://cdn.test/v.mp4'}
        cache.set(_recent_key(USER_ID), self.recent)
        self.dispatch(callback_update(USER_ID, 'animate_video'))

        reference_url, prompt, options = client_class.return_value.generate_video_from_image.call_args.args
        self.assertEqual(reference_url, 'https://cdn.test/result.png')
        self.assertIn('female model', prompt)
        self.assertEqual(options, {'category': 'clothes'})
        self.client_mock.send_video.assert_called_once_with(
            USER_ID, 'https://cdn.test/v.mp4', caption=t('video_ready', 'en')
        )
        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).credits, 0)
        self.assertIsNone(cache.get(_video_job_key(USER_ID)))

    @patch('backend.bot.handlers.GeminiGenClient')
    def test_premium_failure_refunds(self, client_class):
        client_class.return_value.generate_video_from_image.side_effect = GenerationError(
            'Video generation requires a premium plan'
        )
        cache.set(_recent_key(USER_ID), self.recent)
        self.dispatch(callback_update(USER_ID, 'animate_video'))

        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).credits, 1)
        self.assertEqual(sent_texts(self.client_mock)[-1], t('video_premium_required', 'en'))
        self.assertIsNone(cache.get(_video_job_key(USER_ID)))

    @patch('backend.bot.handlers.GeminiGenClient')
    def test_unexpected_failure_refunds(self, client_class):
        client_class.return_value.generate_video_from_image.side_effect = KeyError('operation')
        cache.set(_recent_key(USER_ID), self.recent)
        self.dispatch(callback_update(USER_ID, 'animate_video'))

        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).credits, 1)
        self.assertEqual(sent_texts(self.client_mock)[-1], t('video_failed', 'en'))
        self.assertIsNone(cache.get(_video_job_key(USER_ID)))

    @patch('backend.bot.handlers.GeminiGenClient')
    def test_progress_message_failure_still_sends_video(self, client_class):
        client_class.return_value.generate_video_from_image.return_value = {'videoUrl': 'https://cdn.test/v.mp4'}
        self.client_mock.send_message.side_effect = TelegramError('bot was blocked by the user')
        cache.set(_recent_key(USER_ID), self.recent)
        self.dispatch(callback_update(USER_ID, 'animate_video'))

        self.client_mock.send_video.assert_called_once()
        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).credits, 0)
        self.assertIsNone(cache.get(_video_job_key(USER_ID)))

    def test_job_that_cannot_start_refunds_and_unlocks(self):
        cache.set(_recent_key(USER_ID), self.recent)
        with patch('backend.bot.handlers.run_job', side_effect=RuntimeError("can't start new thread")):
            self.dispatch(callback_update(USER_ID, 'animate_video'))

        self.assertEqual(BotUser.objects.get(telegram_id=USER_ID).credits, 1)
        self.assertIsNone(cache.get(_video_job_key(USER_ID)))
        self.assertEqual(sent_texts(self.client_mock)[-1], t('errors.generic', 'en'))


@override_settings(TELEGRAM_WEBHOOK_SECRET='s3cret')
class WebhookTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.url = '/api/v1/bot/telegram/webhook/'

    @patch('backend.bot.views.handle_update')
    def test_rejects_bad_secret(self, handle_update):
        response = self.client.post(self.url, {'update_id': 1}, format='json',
                                    HTTP_X_TELEGRAM_BOT_API_SECRET_TOKEN='nope')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        handle_update.assert_not_called()

    @patch('backend.bot.views.handle_update')
    def test_dispatches_update(self, handle_update):
        update = message_update(USER_ID, '/start')
        response = self.client.post(self.url, update, format='json',
                                    HTTP_X_TELEGRAM_BOT_API_SECRET_TOKEN='s3cret')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'ok': True})
        self.assertEqual(handle_update.call_args.args[0]['update_id'], 1)

    @patch('backend.bot.views.handle_update', side_effect=TelegramError('chat not found'))
    def test_telegram_errors_still_acknowledge(self, handle_update):
        response = self.client.post(self.url, {'update_id': 3}, format='json',
                                    HTTP_X_TELEGRAM_BOT_API_SECRET_TOKEN='s3cret')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class TelegramClientTests(SimpleTestCase):

    def setUp(self):
        self.session = MagicMock()
        self.client = TelegramClient(token='token', session=self.session)

    def respond(self, body, status_code=200):
        response = MagicMock(status_code=status_code)
        response.json.return_value = body
        self.session.post.return_value = response

    def test_send_message_drops_empty_fields(self):
        self.respond({'ok': True, 'result': {'message_id': 1}})
        result = self.client.send_message(5, 'hi')
        self.assertEqual(result, {'message_id': 1})
        self.session.post.assert_called_once_with(
            'https://api.telegram.org/bottoken/sendMessage',
            json={'chat_id': 5, 'text': 'hi'},
            timeout=30,
        )

    def test_error_response_raises(self):
        self.respond({'ok': False, 'error_code': 400, 'description': 'Bad Request: chat not found'}, 400)
        with self.assertRaises(TelegramError) as ctx:
            self.client.send_message(5, 'hi')
        self.assertEqual(ctx.exception.error_code, 400)

    def test_network_error_raises(self):
        self.session.post.side_effect = requests.ConnectionError('down')
        with self.assertRaises(TelegramError):
            self.client.answer_callback_query('cb')

    def test_get_file_url(self):
        self.respond({'ok': True, 'result': {'file_id': 'f', 'file_path': 'photos/file_1.jpg'}})
        self.assertEqual(
            self.client.get_file_url('f'),
            'https://api.telegram.org/file/bottoken/photos/file_1.jpg',
        )

    def test_missing_token(self):
        with self.assertRaises(TelegramError):
            TelegramClient(token='', session=self.session).send_message(5, 'hi')


class SetWebhookCommandTests(SimpleTestCase):

    def test_rejects_plain_http(self):
        with self.assertRaises(CommandError):
            call_command('set_telegram_webhook', 'http://example.com/hook/')

    @override_settings(TELEGRAM_BOT_TOKEN='token', TELEGRAM_WEBHOOK_SECRET='s3cret')
    @patch('backend.bot.management.commands.set_telegram_webhook.TelegramClient.set_webhook')
    def test_registers_webhook(self, set_webhook):
        call_command('set_telegram_webhook', 'https://example.com/hook/', stdout=MagicMock())
        set_webhook.assert_called_once_with('https://example.com/hook/', 's3cret')
