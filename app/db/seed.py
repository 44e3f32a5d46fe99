from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logger import logger
from app.db.repositories.faq import FAQRepository
from app.db.repositories.settings import SettingsRepository

DEFAULT_SETTINGS = [
    {
        "setting_key": "chatbot_status",
        "setting_value": "active",
        "setting_type": "string",
        "description": "Whether the chat widget is shown to visitors (active/inactive)",
        "is_public": True,
    },
    {
        "setting_key": "welcome_message",
        "setting_value": "Hi there! How can we help you today?",
        "setting_type": "string",
        "description": "First message shown when the widget opens",
        "is_public": True,
    },
    {
        "setting_key": "office_hours",
        "setting_value": "10:00 AM - 7:30 PM, Monday to Friday",
        "setting_type": "string",
        "description": "Displayed when visitors ask for a human",
        "is_public": True,
    },
    {
        "setting_key": "max_history_messages",
        "setting_value": "50",
        "setting_type": "number",
        "description": "Messages the widget requests when it restores a conversation",
        "is_public": False,
    },
]

DEFAULT_FAQS = [
    {
        "question": "What services do you offer?",
        "answer": "We build web and mobile apps, AI solutions and custom software. "
                  "Browse the categories on this site to see live demos.",
        "category": "general",
        "keywords": ["services", "offer", "what do you do"],
        "priority": 1,
    },
    {
        "question": "How much does a project cost?",
        "answer": "Pricing depends on scope. Share your requirements and our team will send a quote.",
        "category": "pricing",
        "keywords": ["price", "pricing", "cost", "quote"],
        "priority": 2,
    },
    {
        "question": "How can I contact your team?",
        "answer": "Email business@code-brew.com or leave your details here and we'll reach out.",
        "category": "contact",
        "keywords": ["contact", "email", "phone", "call"],
        "priority": 3,
    },
]


async def seed_defaults(db: AsyncSession):
    """Insert default settings, and sample FAQ entries into an empty FAQ table."""
    settings_repo = SettingsRepository(db)
    added = await settings_repo.add_missing(DEFAULT_SETTINGS)

    faq_repo = FAQRepository(db)
    if await faq_repo.count_entries() == 0:
        for faq in DEFAULT_FAQS:
            await faq_repo.create_entry(**faq)
        logger.info(f"Seeded {len(DEFAULT_FAQS)} FAQ entries")

    logger.info(f"Seeded {added} chatbot settings")
