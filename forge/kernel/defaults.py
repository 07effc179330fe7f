"""
NexusForge Kernel — Defaults

Fully-defined starting configurations:
  default_bot_config()          — every feature key present, sensible toggles
  website_config(template_id)   — one of the marketplace storefront templates

Every call returns a fresh tree; callers own what they get back.
"""

from __future__ import annotations

import copy
from typing import Any

# Visual presets selectable per site. Selecting one sets `template` and
# merges these values into `theme`.
THEME_PRESETS: dict[str, dict[str, str]] = {
    "modern": {"primaryColor": "#3b82f6", "secondaryColor": "#1f2937", "font": "Inter"},
    "minimalist": {"primaryColor": "#10b981", "secondaryColor": "#f9fafb", "font": "Roboto"},
    "bold": {"primaryColor": "#ef4444", "secondaryColor": "#111827", "font": "Poppins"},
}

DEFAULT_SCRAPER_ENDPOINT = "https://api.bbdbuy.com/scrape"


# ---------------------------------------------------------------------------
# Bot
# ---------------------------------------------------------------------------


def default_bot_config() -> dict[str, Any]:
    """The configuration every new bot project starts from."""
    return {
        "token": "",
        "clientId": "",
        "avatarUrl": "",
        "bannerUrl": "",
        "scraperEndpoint": DEFAULT_SCRAPER_ENDPOINT,
        "status": {"enabled": False, "activityType": "playing", "text": ""},
        "features": {
            "welcomeMessage": {
                "enabled": True,
                "channel": "#general",
                "message": "Welcome {user} to the server!",
                "sendCard": False,
                "cardConfig": {"backgroundColor": "#2c2f33", "textColor": "#ffffff", "title": "Welcome!"},
                "leaveMessage": {"enabled": False, "channel": "#general", "message": "{user} has left the server."},
                "joinRoles": [],
            },
            "moderation": {
                "enabled": True,
                "adminRole": "Moderator",
                "autoModeration": {"enabled": False, "bannedWords": [], "antiSpam": False, "antiLink": False},
            },
            "ticketSystem": {
                "enabled": True,
                "transcripts": True,
                "transcriptChannel": "transcripts",
                "panels": [],
            },
            "imageScraper": False,
            "logging": {"enabled": True, "channel": "bot-logs"},
            "leveling": {
                "enabled": False,
                "levelUpMessage": "Congrats {user}, you reached level {level}!",
                "roleRewards": [],
                "voiceXpRate": 10,
                "cardConfig": {"backgroundColor": "#23272A", "textColor": "#FFFFFF", "barColor": "#7289DA"},
            },
            "reactionRoles": {"enabled": False, "configs": []},
            "music": {"enabled": False, "djRole": "DJ"},
            "socialFeeds": [],
            "birthdays": {"enabled": False, "channel": "#birthdays", "wishMessage": "Happy Birthday {user}!"},
            "polls": {"enabled": False},
            "suggestions": {"enabled": False, "channel": "#suggestions", "upvoteEmoji": "👍", "downvoteEmoji": "👎"},
            "starboard": {"enabled": False, "channel": "#starboard", "starEmoji": "⭐", "starCount": 5},
            "counting": {"enabled": False, "channel": ""},
            "chatGPT": {"enabled": False, "openAIApiKey": ""},
            "imageGeneration": {"enabled": False},
            "modmail": {"enabled": False, "category": "ModMail", "modRole": "Moderator"},
            "verification": {"enabled": False, "channel": "#verify", "verifiedRole": "Member"},
            "autoReact": {"enabled": False, "configs": []},
            "globalChat": {"enabled": False, "channel": "#global"},
            "robloxVerification": {"enabled": False},
            "tempVoiceChannels": {"enabled": False, "category": "Voice Channels"},
            "mediaChannels": {"enabled": False, "channels": []},
            "inviteTracker": {"enabled": False},
            "stickyRoles": {"enabled": False},
            "statisticChannels": {"enabled": False},
            "qotd": {"enabled": False, "channel": "#qotd", "role": "QOTD Master"},
            "translation": {"enabled": False},
            "emojiManager": {"enabled": False},
            "stickyMessages": {"enabled": False, "configs": []},
            "webhooks": {"enabled": False, "hooks": []},
            "ifttt": {"enabled": False, "key": ""},
        },
        "customCommands": [],
        "customEvents": [],
        "embeds": [],
    }


# ---------------------------------------------------------------------------
# Website
# ---------------------------------------------------------------------------


def default_ecommerce() -> dict[str, Any]:
    return {
        "enabled": True,
        "stripePublicKey": "",
        "stripeSecretKey": "",
        "enabledGateways": {"stripe": True, "paypal": True, "crypto": False},
        "cart": {"enabled": True},
        "discounts": [{"id": "d1", "code": "NEXUS10", "type": "percentage", "value": 10}],
        "shippingOptions": [
            {"id": "s1", "name": "Standard", "price": 4.99},
            {"id": "s2", "name": "Express", "price": 14.99},
        ],
    }


def _home_page(hero: tuple[str, str, str], products_title: str, about: tuple[bool, str, str],
               contact: tuple[bool, str, str, str], footer: str) -> dict[str, Any]:
    return {
        "id": "home",
        "title": "Home",
        "path": "/",
        "sections": {
            "hero": {"enabled": True, "order": 1, "title": hero[0], "subtitle": hero[1], "cta": hero[2]},
            "products": {"enabled": True, "order": 2, "title": products_title},
            "about": {"enabled": about[0], "order": 3, "title": about[1], "content": about[2]},
            "contact": {
                "enabled": contact[0], "order": 4, "title": contact[1], "email": contact[2], "phone": contact[3],
            },
            "footer": {"enabled": True, "order": 5, "text": footer},
        },
    }


def _site(template: str, layout: str, seo: tuple[str, str, str], page: dict[str, Any],
          products: list[dict[str, Any]], categories: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "theme": dict(THEME_PRESETS[template]),
        "template": template,
        "productPageLayout": layout,
        "seo": {"metaTitle": seo[0], "metaDescription": seo[1], "faviconUrl": seo[2]},
        "domain": {"customDomain": "", "status": "unlinked"},
        "pages": [page],
        "products": products,
        "categories": categories,
        "subcategories": [],
        "ecommerce": default_ecommerce(),
        "orders": [],
        "analytics": {"totalVisits": 0, "uniqueVisitors": 0, "pageViews": {}, "referrers": {}},
        "customHtml": "",
        "customCss": "",
        "customJs": "",
    }


_UNSPLASH = "https://images.unsplash.com"

WEBSITE_TEMPLATES: dict[str, dict[str, Any]] = {
    "quantum": {
        "id": "quantum",
        "name": "Quantum",
        "description": "A sleek, modern, dark-themed template perfect for tech gadgets and electronics.",
        "tags": ["E-commerce", "Tech", "Dark", "Modern"],
        "config": _site(
            "modern",
            "image-left",
            ("Quantum Tech Store", "The latest in tech gadgets and electronics.",
             "https://cdn-icons-png.flaticon.com/512/8106/8106114.png"),
            _home_page(
                ("Welcome to Quantum", "Discover the future of technology.", "Shop Now"),
                "Featured Products",
                (False, "About Us", "We are a company dedicated to selling the best things."),
                (False, "Contact Us", "contact@example.com", "123-456-7890"),
                "© 2024 Quantum. All rights reserved.",
            ),
            [
                {"id": "prod_1", "name": "Astro-Gears", "price": 199.99, "productType": "physical",
                 "imageUrl": f"{_UNSPLASH}/photo-1518314916381-77a37c2a49ae?q=80&w=800",
                 "description": "High-performance mechanical gears for astrogation units.", "categoryId": "cat_1"},
                {"id": "prod_2", "name": "Cyber-Core License", "price": 499.99, "salePrice": 449.99,
                 "productType": "digital",
                 "imageUrl": f"{_UNSPLASH}/photo-1620282433428-b1416757c913?q=80&w=800",
                 "description": "A quantum-entangled processor license for advanced AI.", "categoryId": "cat_1"},
                {"id": "prod_3", "name": "Retro Gaming Console", "price": 89.99, "productType": "physical",
                 "imageUrl": f"{_UNSPLASH}/photo-1550745165-9bc0b252726a?q=80&w=800",
                 "description": "Classic gaming experience, reimagined.", "categoryId": "cat_2"},
            ],
            [{"id": "cat_1", "name": "Processors"}, {"id": "cat_2", "name": "Gaming"}],
        ),
    },
    "serene": {
        "id": "serene",
        "name": "Serene",
        "description": "A clean, minimalist, light-themed template for portfolios, blogs, or artisan shops.",
        "tags": ["Minimalist", "Light", "Portfolio", "Blog"],
        "config": _site(
            "minimalist",
            "image-top",
            ("Serene Creations", "Handcrafted goods and articles.", ""),
            _home_page(
                ("Simplicity & Elegance", "Handcrafted goods for a mindful life.", "Explore"),
                "Our Collection",
                (True, "Our Story", "We believe in the power of simplicity and quality craftsmanship."),
                (False, "Contact Us", "contact@example.com", "123-456-7890"),
                "© 2024 Serene. All rights reserved.",
            ),
            [
                {"id": "p1", "name": "Ceramic Vase", "price": 45.00, "productType": "physical",
                 "imageUrl": f"{_UNSPLASH}/photo-1525944322196-216a97e065a3?q=80&w=800",
                 "description": "A beautiful, handcrafted ceramic vase.", "categoryId": "c1"},
                {"id": "p2", "name": "E-Book: The Art of Zen", "price": 19.99, "productType": "digital",
                 "imageUrl": f"{_UNSPLASH}/photo-1532012197267-da84d127e765?q=80&w=800",
                 "description": "A digital guide to mindful living and design.", "categoryId": "c1"},
            ],
            [{"id": "c1", "name": "Homeware"}],
        ),
    },
    "ember": {
        "id": "ember",
        "name": "Ember",
        "description": "A bold and vibrant template ideal for restaurants, cafes, or food blogs.",
        "tags": ["Bold", "Food", "Restaurant", "Vibrant"],
        "config": _site(
            "bold",
            "image-left",
            ("Ember Grill", "Taste the flame.", ""),
            _home_page(
                ("EMBER GRILL", "Where Fire Meets Flavor.", "View Menu"),
                "Signature Dishes",
                (False, "About Us", "We are a company dedicated to selling the best things."),
                (True, "Reservations", "book@ember.com", "123-555-7890"),
                "© 2024 Ember Grill. All rights reserved.",
            ),
            [
                {"id": "d1", "name": "Flame-Grilled Steak", "price": 32.50, "salePrice": 28.00,
                 "productType": "physical",
                 "imageUrl": f"{_UNSPLASH}/photo-1555939594-58d7cb561ad1?q=80&w=800",
                 "description": "Aged to perfection and grilled over an open flame.", "categoryId": "mains"},
                {"id": "d2", "name": "Gourmet Spice Rub", "price": 16.00, "productType": "physical",
                 "imageUrl": f"{_UNSPLASH}/photo-1600742444738-9e0c72b2a8d3?q=80&w=800",
                 "description": "Take home the signature taste of Ember Grill.", "categoryId": "starters"},
            ],
            [{"id": "mains", "name": "Mains"}, {"id": "starters", "name": "Starters"}],
        ),
    },
}


def website_config(template_id: str = "quantum") -> dict[str, Any]:
    """A fresh copy of a marketplace template's configuration."""
    try:
        template = WEBSITE_TEMPLATES[template_id]
    except KeyError:
        raise KeyError(f"Unknown website template: {template_id}") from None
    return copy.deepcopy(template["config"])
