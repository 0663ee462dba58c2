"""
Text catalog — every user-facing string, in English and Persian.

Language only changes what is rendered. Stored data, action identity and
control flow are the same in every language.

Usage:
    texts = Texts("fa")
    texts.get("billing_id_saved", billing_id="12345")
    texts.label(Action.ACTIVATE)
"""

from __future__ import annotations

from blackout.bot.actions import Action
from blackout.store.subscriber import DEFAULT_SCHEDULE_TIME

TOKEN_PLACEHOLDER = "******"

_LABELS: dict[Action, dict[str, str]] = {
    Action.WELCOME: {"en": "🏠 Menu", "fa": "🏠 منو"},
    Action.SET_BILLING_ID: {"en": "🔑 Set Bill ID", "fa": "🔑 تنظیم شناسه قبض"},
    Action.SET_AUTH_TOKEN: {
        "en": "🔐 Set Authorization Token",
        "fa": "🔐 تنظیم توکن احراز هویت",
    },
    Action.SET_SCHEDULE_TIME: {"en": "⏰ Set Schedule Time", "fa": "⏰ تنظیم زمان برنامه"},
    Action.ACTIVATE: {"en": "▶️ Start Bot", "fa": "▶️ شروع ربات"},
    Action.DEACTIVATE: {"en": "🛑 Stop Bot", "fa": "🛑 توقف ربات"},
    Action.SHOW_SETTINGS: {"en": "📋 Show Settings", "fa": "📋 نمایش تنظیمات"},
    Action.CANCEL: {"en": "❌ Cancel", "fa": "❌ لغو"},
}

_COMMAND_DESCRIPTIONS: dict[Action, dict[str, str]] = {
    Action.WELCOME: {"en": "Show the welcome message and menu", "fa": "نمایش پیام خوش‌آمد و منو"},
    Action.ACTIVATE: {"en": "Start daily outage checks", "fa": "شروع بررسی روزانه"},
    Action.DEACTIVATE: {"en": "Stop daily outage checks", "fa": "توقف بررسی روزانه"},
    Action.SET_BILLING_ID: {"en": "Set your bill ID", "fa": "تنظیم شناسه قبض"},
    Action.SET_AUTH_TOKEN: {"en": "Set your authorization token", "fa": "تنظیم توکن احراز هویت"},
    Action.SET_SCHEDULE_TIME: {"en": "Set the daily check time", "fa": "تنظیم زمان بررسی روزانه"},
    Action.SHOW_SETTINGS: {"en": "Show current settings", "fa": "نمایش تنظیمات فعلی"},
    Action.CANCEL: {"en": "Cancel the current input", "fa": "لغو ورودی فعلی"},
}

_MESSAGES: dict[str, dict[str, str]] = {
    "welcome": {
        "en": (
            "👋 Welcome to Power Outage Bot!\n\n"
            "This bot will check for power outage information daily at your scheduled time.\n\n"
            "Before starting, please set:\n"
            "1. Your Bill ID\n"
            "2. Your Authorization Token (you can get it from the Bargheman.com website)\n"
            "3. Optional: Schedule time (default: {default_time}, {zone} time)\n\n"
            "Use the buttons below to configure the bot."
        ),
        "fa": (
            "👋 به ربات قطعی برق خوش آمدید!\n\n"
            "این ربات اطلاعات قطعی برق را به صورت روزانه در زمان تعیین شده بررسی می‌کند.\n\n"
            "قبل از شروع، لطفا موارد زیر را تنظیم کنید:\n"
            "1. شناسه قبض خود\n"
            "2. توکن احراز هویت خود (می‌توانید آن را از وب‌سایت Bargheman.com دریافت کنید)\n"
            "3. اختیاری: زمان برنامه (پیش‌فرض: {default_time}، به وقت {zone})\n\n"
            "از دکمه‌های زیر برای پیکربندی ربات استفاده کنید."
        ),
    },
    "prompt_billing_id": {
        "en": "Please enter your Bill ID:",
        "fa": "لطفا شناسه قبض خود را وارد کنید:",
    },
    "prompt_auth_token": {
        "en": "Please enter your Authorization Token:",
        "fa": "لطفا توکن احراز هویت خود را وارد کنید:",
    },
    "prompt_schedule_time": {
        "en": "Please enter the time for daily checks (24h format, e.g. 08:00):\nCurrent time zone: {zone}",
        "fa": "لطفا زمان بررسی روزانه را وارد کنید (فرمت 24 ساعته، مثال 08:00):\nمنطقه زمانی فعلی: {zone}",
    },
    "empty_input": {
        "en": "⚠️ The value can't be empty. Please try again.",
        "fa": "⚠️ مقدار نمی‌تواند خالی باشد. لطفا دوباره تلاش کنید.",
    },
    "invalid_time": {
        "en": "⚠️ Invalid time format. Please use 24h format (e.g. 08:00).",
        "fa": "⚠️ فرمت زمان نامعتبر است. لطفا از فرمت 24 ساعته استفاده کنید (مثال 08:00).",
    },
    "billing_id_saved": {
        "en": "✅ Bill ID saved: {billing_id}",
        "fa": "✅ شناسه قبض ذخیره شد: {billing_id}",
    },
    "auth_token_saved": {
        "en": "✅ Authorization Token saved.",
        "fa": "✅ توکن احراز هویت ذخیره شد.",
    },
    "schedule_time_saved": {
        "en": "✅ Schedule time saved: {schedule_time} ({zone} time)",
        "fa": "✅ زمان برنامه ذخیره شد: {schedule_time} (به وقت {zone})",
    },
    "missing_credentials": {
        "en": "⚠️ Please set your Bill ID and Authorization Token first.",
        "fa": "⚠️ لطفا ابتدا شناسه قبض و توکن احراز هویت خود را تنظیم کنید.",
    },
    "fetching": {
        "en": "🔄 Fetching data from API...",
        "fa": "🔄 در حال دریافت اطلاعات از API...",
    },
    "activated": {
        "en": "✅ Bot started! You will receive daily updates at {schedule_time} ({zone} time).",
        "fa": "✅ ربات شروع شد! شما به‌روزرسانی‌های روزانه را در ساعت {schedule_time} (به وقت {zone}) دریافت خواهید کرد.",
    },
    "deactivated": {
        "en": "⏹️ Bot stopped. You will no longer receive scheduled updates.",
        "fa": "⏹️ ربات متوقف شد. شما دیگر به‌روزرسانی‌های برنامه‌ریزی شده را دریافت نخواهید کرد.",
    },
    "cancelled": {
        "en": "❌ Operation cancelled.",
        "fa": "❌ عملیات لغو شد.",
    },
    "no_settings": {
        "en": "⚠️ No settings found. Please configure the bot first.",
        "fa": "⚠️ تنظیماتی یافت نشد. لطفا ابتدا ربات را پیکربندی کنید.",
    },
    "settings": {
        "en": (
            "📋 Current Settings:\n\n"
            "🔑 Bill ID: {billing_id}\n"
            "🔐 Authorization Token: {auth_token}\n"
            "⏰ Schedule Time: {schedule_time} ({zone} time)\n"
            "🤖 Bot Status: {status}"
        ),
        "fa": (
            "📋 تنظیمات فعلی:\n\n"
            "🔑 شناسه قبض: {billing_id}\n"
            "🔐 توکن احراز هویت: {auth_token}\n"
            "⏰ زمان برنامه: {schedule_time} (به وقت {zone})\n"
            "🤖 وضعیت ربات: {status}"
        ),
    },
    "not_set": {"en": "Not set", "fa": "تنظیم نشده"},
    "status_active": {"en": "Active ✅", "fa": "فعال ✅"},
    "status_inactive": {"en": "Inactive ❌", "fa": "غیرفعال ❌"},
    "report_header": {
        "en": "📊 Power Outage Report\n📅 Date: {date}",
        "fa": "📊 گزارش قطعی برق\n📅 تاریخ: {date}",
    },
    "report_empty": {
        "en": "No power outages found.",
        "fa": "هیچ قطعی برقی یافت نشد.",
    },
    "report_entry": {
        "en": (
            "⏰ Outage Start Time: {start}\n"
            "⏰ Outage Stop Time: {end}\n"
            "📍 Address: {address}\n"
            "🔌 Reason: {reason}"
        ),
        "fa": (
            "⏰ زمان شروع قطعی: {start}\n"
            "⏰ زمان پایان قطعی: {end}\n"
            "📍 آدرس: {address}\n"
            "🔌 دلیل: {reason}"
        ),
    },
    "report_error": {
        "en": "Error: Failed to fetch data from API",
        "fa": "خطا: دریافت اطلاعات از API ناموفق بود",
    },
}

# Display names for the reference zone; anything else is shown as its key.
_ZONE_NAMES: dict[str, dict[str, str]] = {
    "Asia/Tehran": {"en": "Tehran", "fa": "تهران"},
}


class Texts:
    """Localized renderer bound to one language."""

    def __init__(self, language: str = "en", timezone: str = "Asia/Tehran") -> None:
        self.language = language if language in ("en", "fa") else "en"
        self._zone = _ZONE_NAMES.get(timezone, {}).get(self.language, timezone)

    @property
    def zone(self) -> str:
        return self._zone

    def get(self, key: str, **values: object) -> str:
        template = _MESSAGES[key][self.language]
        return template.format(zone=self._zone, default_time=DEFAULT_SCHEDULE_TIME, **values)

    def label(self, action: Action) -> str:
        return _LABELS[action][self.language]

    def command_description(self, action: Action) -> str:
        return _COMMAND_DESCRIPTIONS[action][self.language]
