"""
NexusForge Kernel — Storefront Renderer

Pure function: (website config, preview state) → HTML document string.
No IO. Deterministic: same input → same output, always.

The document is self-contained: style block (template preset + theme
colours + custom CSS), navigation, the content for the active preview
state, a cart panel and the click-delegation script. The document never
talks to the workspace directly. Every interaction is reported to the
embedding window with

    window.parent.postMessage({action, payload}, '*')

and the host decides what to do with it (see forge.kernel.preview).

Money is Decimal throughout: effective price is salePrice when present,
else price; checkout adds a flat 4.99 shipping charge; amounts are
truncated to two decimals (never rounded up) and shown as $x.yy.
"""

from __future__ import annotations

import json
import re
from decimal import ROUND_DOWN, Decimal
from html import escape as _html_escape
from typing import Any

import chevron

from forge.kernel.defaults import THEME_PRESETS
from forge.kernel.types import (
    SHIPPING_FLAT_RATE,
    CheckoutPreview,
    OrderSuccessPreview,
    PagePreview,
    PreviewState,
    ProductPreview,
)

CENT = Decimal("0.01")

SECTION_NAMES: tuple[str, ...] = ("hero", "about", "products", "contact", "footer")

DEFAULT_FONT = "Inter"

_COLOR_RE = re.compile(r"^(#[0-9A-Fa-f]{3,8}|[A-Za-z]{3,20})$")
_FONT_RE = re.compile(r"^[A-Za-z0-9 ]{1,60}$")
_STYLE_CLOSE_RE = re.compile(r"</(style)", re.IGNORECASE)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render_site(
    config: dict[str, Any],
    preview: PreviewState | None = None,
    *,
    site_name: str,
) -> str:
    """
    Render the complete storefront document for one preview state.
    A missing preview state shows the first page.
    Pure function. No side effects. No IO.
    """
    pages = config.get("pages", [])
    if preview is None:
        preview = PagePreview(pages[0]["id"] if pages else "home")

    theme = _theme(config)
    template = config.get("template", "modern")
    if template not in TEMPLATE_CSS:
        template = "modern"
    cart_enabled = _cart_enabled(config)
    seo = config.get("seo", {})

    parts: list[str] = []

    parts.append("<!DOCTYPE html>")
    parts.append('<html lang="en">')
    parts.append("<head>")
    parts.append('  <meta charset="utf-8">')
    parts.append('  <meta name="viewport" content="width=device-width, initial-scale=1">')
    parts.append(f"  <title>{escape(seo.get('metaTitle') or site_name)}</title>")
    if seo.get("metaDescription"):
        parts.append(f'  <meta name="description" content="{escape(seo["metaDescription"])}">')
    if seo.get("faviconUrl"):
        parts.append(f'  <link rel="icon" href="{escape(seo["faviconUrl"])}">')
    parts.append('  <script src="https://cdn.tailwindcss.com"></script>')

    # CSS
    parts.append("  <style>")
    parts.append(_render_css(config, template, theme))
    parts.append("  </style>")

    parts.append("</head>")
    parts.append(f'<body class="theme-{template}">')

    parts.append(_render_nav(config, template, theme, site_name, cart_enabled))

    # Content
    if isinstance(preview, PagePreview):
        parts.append(_render_page(config, preview.id, theme))
    elif isinstance(preview, ProductPreview):
        parts.append(_render_product(config, preview.id, theme, cart_enabled))
    elif isinstance(preview, CheckoutPreview):
        parts.append(_render_checkout(list(preview.cart)))
    elif isinstance(preview, OrderSuccessPreview):
        parts.append(_render_order_success(pages[0]["id"] if pages else "home"))
    else:
        raise TypeError(f"Unknown preview state: {preview!r}")

    # Scripts
    if cart_enabled:
        parts.append(CART_PANEL_HTML)
        parts.append(CART_SCRIPT)
    parts.append(INTERACTION_SCRIPT)

    parts.append("</body>")
    parts.append("</html>")

    return "\n".join(parts)


def effective_price(item: dict[str, Any]) -> Decimal:
    """salePrice when present, else price."""
    sale = item.get("salePrice")
    raw = sale if sale is not None else item.get("price", 0)
    return Decimal(str(raw))


def checkout_totals(cart: list[dict[str, Any]]) -> tuple[Decimal, Decimal, Decimal]:
    """
    (subtotal, shipping, total) for a cart, each truncated to cents.

    Examples:
      [{price: 10, salePrice: 8}, {price: 20}] → (28.00, 4.99, 32.99)
      []                                       → (0.00, 4.99, 4.99)
    """
    subtotal = sum((effective_price(item) for item in cart), Decimal("0"))
    total = subtotal + SHIPPING_FLAT_RATE
    return _truncate(subtotal), SHIPPING_FLAT_RATE, _truncate(total)


def format_money(amount: Decimal | int | float) -> str:
    """Two fraction digits, truncated: 12.349 → "$12.34"."""
    return f"${_truncate(Decimal(str(amount)))}"


# ---------------------------------------------------------------------------
# Style
# ---------------------------------------------------------------------------

BASE_CSS = """
html { scroll-behavior: smooth; }
.prose img { margin-top: 1em; margin-bottom: 1em; border-radius: 0.5rem; }
.nf-notice { padding: 4rem 2rem; text-align: center; opacity: 0.8; }
#cart-panel {
  position: fixed; top: 0; right: 0; width: 350px; height: 100%;
  box-shadow: -10px 0 20px rgba(0,0,0,0.2);
  transform: translateX(100%); transition: transform 0.3s ease-in-out;
  z-index: 100;
}
#cart-panel.open { transform: translateX(0); }
#cart-backdrop {
  position: fixed; top: 0; left: 0; width: 100%; height: 100%;
  background-color: rgba(0,0,0,0.5); z-index: 99;
  opacity: 0; pointer-events: none; transition: opacity 0.3s ease-in-out;
}
#cart-backdrop.open { opacity: 1; pointer-events: auto; }
""".strip()

TEMPLATE_CSS: dict[str, str] = {
    "modern": """
body { background-color: #111827; color: #f3f4f6; }
.card { background-color: #1f2937; border-radius: 0.75rem; box-shadow: 0 10px 15px -3px rgba(0,0,0,0.1), 0 4px 6px -2px rgba(0,0,0,0.05); }
.btn-primary { background-image: linear-gradient(to right, {{primary}}, #6366f1); color: white; border-radius: 9999px; transition: transform 0.2s; }
.btn-primary:hover { transform: scale(1.05); }
header { background-color: rgba(31, 41, 55, 0.8); backdrop-filter: blur(10px); }
.form-input { background-color: #374151; border: 1px solid #4b5563; border-radius: 0.5rem; padding: 0.75rem 1rem; color: #f3f4f6; }
.form-input:focus { outline: none; border-color: {{primary}}; box-shadow: 0 0 0 2px {{primary}}40; }
#cart-panel { background-color: #1f2937; color: #ffffff; }
""",
    "minimalist": """
body { background-color: #ffffff; color: #374151; }
.card { border: 1px solid #e5e7eb; border-radius: 0; }
.btn-primary { background-color: {{primary}}; color: white; border-radius: 0; }
header { background-color: #ffffff; box-shadow: none; border-bottom: 1px solid #e5e7eb; }
nav { color: #1f2937; }
.form-input { background-color: #f9fafb; border: 1px solid #d1d5db; border-radius: 0.25rem; padding: 0.75rem 1rem; color: #111827; }
.form-input:focus { outline: none; border-color: {{primary}}; box-shadow: 0 0 0 2px {{primary}}40; }
#cart-panel { background-color: #ffffff; color: #111111; }
""",
    "bold": """
body { background-color: #000000; color: #ffffff; }
.card { background-color: #111827; border: 2px solid {{primary}}; border-radius: 0; }
.btn-primary { background-color: {{primary}}; color: {{secondary}}; font-weight: 900; border-radius: 0; }
h1, h2, h3, h4 { text-transform: uppercase; font-weight: 900; letter-spacing: 0.05em; }
.form-input { background-color: #1f2937; border: 1px solid #4b5563; border-radius: 0; padding: 0.75rem 1rem; color: #f3f4f6; }
.form-input:focus { outline: none; border-color: {{primary}}; box-shadow: 0 0 0 2px {{primary}}40; }
#cart-panel { background-color: #1f2937; color: #ffffff; }
""",
}


def _theme(config: dict[str, Any]) -> dict[str, str]:
    """Theme values safe to drop into CSS. Invalid values fall back to the template preset."""
    template = config.get("template", "modern")
    preset = THEME_PRESETS.get(template, THEME_PRESETS["modern"])
    theme = config.get("theme", {})

    primary = theme.get("primaryColor", "")
    secondary = theme.get("secondaryColor", "")
    font = theme.get("font", "")
    return {
        "primary": primary if _COLOR_RE.match(primary) else preset["primaryColor"],
        "secondary": secondary if _COLOR_RE.match(secondary) else preset["secondaryColor"],
        "font": font if _FONT_RE.match(font) else DEFAULT_FONT,
    }


def _render_css(config: dict[str, Any], template: str, theme: dict[str, str]) -> str:
    font = theme["font"]
    font_css = "\n".join([
        f"@import url('https://fonts.googleapis.com/css2?family={font.replace(' ', '+')}:wght@400;700;900&display=swap');",
        f"body {{ font-family: '{font}', sans-serif; }}",
    ])
    template_css = chevron.render(TEMPLATE_CSS[template], theme).strip()

    custom_css = config.get("customCss", "")
    # A stylesheet must not be able to end the <style> element early
    custom_css = _STYLE_CLOSE_RE.sub(r"<\\/\1", custom_css)

    return "\n".join(part for part in [font_css, BASE_CSS, template_css, custom_css] if part)


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

CART_ICON_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" class="h-6 w-6" fill="none" viewBox="0 0 24 24" stroke="currentColor">'
    '<path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" '
    'd="M3 3h2l.4 2M7 13h10l4-8H5.4M7 13L5.4 5M7 13l-2.293 2.293c-.63.63-.184 1.707.707 1.707H17m0 0a2 2 0 100 4 '
    '2 2 0 000-4zm-8 2a2 2 0 11-4 0 2 2 0 014 0z" /></svg>'
)


def _render_nav(
    config: dict[str, Any],
    template: str,
    theme: dict[str, str],
    site_name: str,
    cart_enabled: bool,
) -> str:
    background = "white" if template == "minimalist" else theme["secondary"]
    lines = [
        f'  <nav class="p-4 flex justify-between items-center sticky top-0 z-10" style="background-color: {background};">',
        f'    <h1 class="text-xl font-bold" style="color: {theme["primary"]};">{escape(site_name)}</h1>',
        '    <div class="flex gap-6 items-center">',
    ]
    for page in config.get("pages", []):
        lines.append(
            f'      <a href="#" data-action="navigate" data-id="{escape(page["id"])}">'
            f'{escape(page.get("title", ""))}</a>'
        )
    if cart_enabled:
        lines.append('      <div id="cart-icon" class="relative cursor-pointer">')
        lines.append(f"        {CART_ICON_SVG}")
        lines.append(
            '        <span id="cart-count" class="absolute -top-2 -right-2 bg-red-500 text-white text-xs '
            'rounded-full h-5 w-5 flex items-center justify-center font-bold">0</span>'
        )
        lines.append("      </div>")
    lines.append("    </div>")
    lines.append("  </nav>")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Content: pages
# ---------------------------------------------------------------------------


def _render_page(config: dict[str, Any], page_id: str, theme: dict[str, str]) -> str:
    page = next((p for p in config.get("pages", []) if p.get("id") == page_id), None)
    if page is None:
        return _not_found("Page not found", "This page does not exist or has been removed.")

    sections = page.get("sections", {})
    enabled = [
        name for name in SECTION_NAMES
        if isinstance(sections.get(name), dict) and sections[name].get("enabled")
    ]
    # Stable sort: sections without an explicit order keep their natural position
    enabled.sort(key=lambda name: sections[name].get("order", SECTION_NAMES.index(name) + 1))

    parts: list[str] = []
    for name in enabled:
        section = sections[name]
        if name == "hero":
            parts.append(_render_hero(section, theme))
        elif name == "about":
            parts.append(
                '  <section class="p-8"><div class="max-w-4xl mx-auto">'
                f'<h3 class="text-3xl font-bold text-center mb-4">{escape(section.get("title", ""))}</h3>'
                f'<p>{escape(section.get("content", ""))}</p></div></section>'
            )
        elif name == "products":
            parts.append(_render_catalog(config, section, theme))
        elif name == "contact":
            parts.append(
                '  <section class="p-8"><div class="max-w-4xl mx-auto text-center">'
                f'<h3 class="text-3xl font-bold mb-4">{escape(section.get("title", ""))}</h3>'
                f'<p>Email: {escape(section.get("email", ""))}</p>'
                f'<p>Phone: {escape(section.get("phone", ""))}</p></div></section>'
            )
        elif name == "footer":
            parts.append(
                f'  <footer class="text-center py-6" style="background-color: {theme["secondary"]};">'
                f'<p class="opacity-70">{escape(section.get("text", ""))}</p></footer>'
            )
    return "\n".join(parts)


def _render_hero(section: dict[str, Any], theme: dict[str, str]) -> str:
    return "\n".join([
        f'  <header class="text-center py-20 px-4" style="background-color: {theme["secondary"]};">',
        f'    <h2 class="text-4xl font-bold">{escape(section.get("title", ""))}</h2>',
        f'    <p class="mt-2 text-lg opacity-80">{escape(section.get("subtitle", ""))}</p>',
        f'    <a href="#products" class="inline-block mt-6 px-6 py-3 font-semibold btn-primary">'
        f'{escape(section.get("cta", ""))}</a>',
        "  </header>",
    ])


def _render_catalog(config: dict[str, Any], section: dict[str, Any], theme: dict[str, str]) -> str:
    """Products grouped by category, in category order. Uncategorised products come last."""
    products = config.get("products", [])
    categories = config.get("categories", [])
    category_ids = {c.get("id") for c in categories}

    groups: list[tuple[str | None, list[dict[str, Any]]]] = []
    for cat in categories:
        cat_products = [p for p in products if p.get("categoryId") == cat.get("id")]
        if cat_products:
            groups.append((cat.get("name", ""), cat_products))
    loose = [p for p in products if p.get("categoryId") not in category_ids]
    if loose:
        groups.append((None, loose))

    lines = ['  <main id="products" class="p-8">']
    if section.get("title"):
        lines.append(f'    <h2 class="text-4xl font-bold text-center mb-10">{escape(section["title"])}</h2>')
    for heading, group in groups:
        lines.append('    <div class="mb-12">')
        if heading is not None:
            lines.append(f'      <h3 class="text-3xl font-bold mb-6">{escape(heading)}</h3>')
        lines.append('      <div class="grid grid-cols-1 sm:grid-cols-2 lg:grid-cols-4 gap-6">')
        for product in group:
            lines.append(_render_product_card(product, theme))
        lines.append("      </div>")
        lines.append("    </div>")
    lines.append("  </main>")
    return "\n".join(lines)


def _render_product_card(product: dict[str, Any], theme: dict[str, str]) -> str:
    name = escape(product.get("name", ""))
    return "\n".join([
        '        <div class="card overflow-hidden flex flex-col">',
        f'          <img src="{escape(product.get("imageUrl", ""))}" alt="{name}" class="w-full h-48 object-cover" />',
        '          <div class="p-4 flex-grow flex flex-col">',
        f'            <h4 class="font-bold text-lg">{name}</h4>',
        f'            <div class="mt-1 mb-4">{_price_html(product, theme, "text-xl")}</div>',
        f'            <button data-action="viewProduct" data-id="{escape(product.get("id", ""))}" '
        'class="mt-auto w-full py-2 font-semibold btn-primary">View Details</button>',
        "          </div>",
        "        </div>",
    ])


def _price_html(product: dict[str, Any], theme: dict[str, str], size: str) -> str:
    if product.get("salePrice") is not None:
        return (
            f'<span class="{size} font-bold text-red-500">{format_money(product["salePrice"])}</span>'
            f'<span class="text-sm line-through opacity-60 ml-2">{format_money(product.get("price", 0))}</span>'
        )
    return (
        f'<span class="{size} font-bold" style="color: {theme["primary"]};">'
        f'{format_money(product.get("price", 0))}</span>'
    )


# ---------------------------------------------------------------------------
# Content: product detail
# ---------------------------------------------------------------------------


def _render_product(config: dict[str, Any], product_id: str, theme: dict[str, str], cart_enabled: bool) -> str:
    product = next((p for p in config.get("products", []) if p.get("id") == product_id), None)
    if product is None:
        return _not_found("Product not found", "This product is no longer available.")

    layout = "md:grid-cols-2 gap-8" if config.get("productPageLayout") == "image-left" else "md:grid-cols-1 gap-4"
    name = escape(product.get("name", ""))

    lines = [
        '  <div class="p-8 max-w-6xl mx-auto">',
        f'    <div class="grid {layout} items-start">',
        f'      <img src="{escape(product.get("imageUrl", ""))}" alt="{name}" class="w-full rounded-lg shadow-lg"/>',
        '      <div class="pt-8 md:pt-0">',
        f'        <h2 class="text-4xl font-bold">{name}</h2>',
        f'        <div class="text-3xl my-4">{_price_html(product, theme, "text-3xl")}</div>',
        f'        <div class="opacity-80 mb-6 prose">{escape(product.get("description", ""))}</div>',
    ]

    variants = product.get("variants") or []
    if variants:
        lines.append('        <div class="space-y-4 mb-6">')
        for variant in variants:
            options = "".join(f"<option>{escape(opt)}</option>" for opt in variant.get("options", []))
            lines.append(
                f'          <div><label class="block text-sm font-medium mb-1">{escape(variant.get("type", ""))}</label>'
                f'<select class="form-input w-full">{options}</select></div>'
            )
        lines.append("        </div>")

    if cart_enabled:
        payload = escape(json.dumps(product, ensure_ascii=False, default=str))
        lines.append(
            f'        <button data-action="addToCart" data-product="{payload}" '
            'class="px-8 py-4 font-semibold btn-primary text-lg">Add to Cart</button>'
        )

    lines += ["      </div>", "    </div>", "  </div>"]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Content: checkout and confirmation
# ---------------------------------------------------------------------------

SHIPPING_FIELDS: tuple[tuple[str, str], ...] = (
    ("name", "Full Name"),
    ("street", "Street Address"),
    ("city", "City"),
    ("state", "State / Province"),
    ("zip", "ZIP / Postal Code"),
    ("country", "Country"),
)

CHECKOUT_SCRIPT = """  <script>
    (function () {
      const order = JSON.parse(document.getElementById('nf-order-data').textContent);
      document.getElementById('checkout-form').addEventListener('submit', function (e) {
        e.preventDefault();
        const data = Object.fromEntries(new FormData(e.target).entries());
        const payload = { customerEmail: data.email, items: order.items, total: order.total };
        if (order.needsShipping) {
          payload.shippingAddress = {
            name: data.name, street: data.street, city: data.city,
            state: data.state, zip: data.zip, country: data.country
          };
        }
        window.parent.postMessage({ action: 'placeOrder', payload: payload }, '*');
      });
    })();
  </script>"""


def _render_checkout(cart: list[dict[str, Any]]) -> str:
    subtotal, shipping, total = checkout_totals(cart)
    needs_shipping = any(item.get("productType") == "physical" for item in cart)

    lines = [
        '  <div id="checkout-view" class="p-8 max-w-4xl mx-auto">',
        '    <h2 class="text-3xl font-bold text-center mb-8">Checkout</h2>',
        '    <form id="checkout-form" class="grid md:grid-cols-2 gap-8">',
        "      <div>",
        '        <h3 class="font-bold text-lg mb-4">Contact Information</h3>',
        '        <input type="email" name="email" placeholder="Email Address" class="form-input w-full" required />',
    ]
    if needs_shipping:
        lines.append('        <div id="shipping-address-form">')
        lines.append('          <h3 class="font-bold text-lg mb-4 mt-6">Shipping Address</h3>')
        for field_name, placeholder in SHIPPING_FIELDS:
            lines.append(
                f'          <input type="text" name="{field_name}" placeholder="{placeholder}" '
                'class="form-input w-full mb-4" required />'
            )
        lines.append("        </div>")
    lines.append("      </div>")

    lines.append('      <div class="card p-6">')
    lines.append('        <h3 class="font-bold text-lg mb-4">Your Order</h3>')
    for item in cart:
        lines.append(
            '        <div class="flex justify-between items-center text-sm">'
            f'<div class="flex items-center gap-2"><img src="{escape(item.get("imageUrl", ""))}" '
            'class="w-10 h-10 rounded-md object-cover" />'
            f'<p>{escape(item.get("name", ""))}</p></div>'
            f"<p>{format_money(effective_price(item))}</p></div>"
        )
    lines += [
        f'        <div class="flex justify-between pt-3 mt-3"><p>Subtotal</p><p id="checkout-subtotal">{format_money(subtotal)}</p></div>',
        f'        <div class="flex justify-between"><p>Shipping</p><p id="checkout-shipping">{format_money(shipping)}</p></div>',
        f'        <div class="flex justify-between font-bold pt-3 mt-3"><p>Total</p><p id="checkout-total">{format_money(total)}</p></div>',
        '        <button type="submit" class="w-full py-3 btn-primary font-semibold mt-4">Place Order</button>',
        "      </div>",
        "    </form>",
    ]

    order_data = {"items": cart, "total": float(total), "needsShipping": needs_shipping}
    lines.append(f'  <script type="application/json" id="nf-order-data">{script_json(order_data)}</script>')
    lines.append(CHECKOUT_SCRIPT)
    lines.append("  </div>")
    return "\n".join(lines)


def _render_order_success(home_id: str) -> str:
    return "\n".join([
        '  <div class="p-8 max-w-2xl mx-auto text-center">',
        '    <div class="text-6xl mb-4">✅</div>',
        '    <h2 class="text-3xl font-bold mb-4">Thank You!</h2>',
        '    <p class="opacity-80 mb-6">Your order has been placed successfully. '
        "A confirmation email has been sent to you.</p>",
        f'    <button data-action="navigate" data-id="{escape(home_id)}" '
        'class="px-8 py-3 font-semibold btn-primary">Continue Shopping</button>',
        "  </div>",
    ])


def _not_found(title: str, message: str) -> str:
    return (
        f'  <div class="nf-notice"><h2 class="text-3xl font-bold mb-4">{escape(title)}</h2>'
        f"<p>{escape(message)}</p></div>"
    )


# ---------------------------------------------------------------------------
# Cart panel and interaction scripts
# ---------------------------------------------------------------------------

CART_PANEL_HTML = """  <div id="cart-backdrop"></div>
  <div id="cart-panel" class="flex flex-col">
    <div class="p-4 flex justify-between items-center">
      <h3 class="font-bold text-lg">Your Cart</h3>
      <button id="close-cart-btn" class="text-2xl">&times;</button>
    </div>
    <div id="cart-items" class="flex-grow p-4 overflow-y-auto">
      <p class="opacity-60">Your cart is empty.</p>
    </div>
    <div class="p-4">
      <div class="flex justify-between font-bold"><span>Subtotal</span><span id="cart-subtotal">$0.00</span></div>
      <button id="checkout-btn" class="w-full mt-4 py-3 font-semibold btn-primary">Proceed to Checkout</button>
    </div>
  </div>"""

CART_SCRIPT = """  <script>
    (function () {
      const panel = document.getElementById('cart-panel');
      const backdrop = document.getElementById('cart-backdrop');
      const itemsEl = document.getElementById('cart-items');
      const subtotalEl = document.getElementById('cart-subtotal');
      const countEl = document.getElementById('cart-count');
      const cart = [];

      function toggleCart() {
        panel.classList.toggle('open');
        backdrop.classList.toggle('open');
      }

      function price(item) {
        return item.salePrice != null ? item.salePrice : item.price;
      }

      // Truncates to cents, as the checkout does
      function money(amount) {
        const cents = Math.floor(Math.round(Number(amount) * 10000) / 100);
        return '$' + (cents / 100).toFixed(2);
      }

      function renderCart() {
        itemsEl.textContent = '';
        if (cart.length === 0) {
          const empty = document.createElement('p');
          empty.className = 'opacity-60';
          empty.textContent = 'Your cart is empty.';
          itemsEl.appendChild(empty);
        }
        cart.forEach(function (item) {
          const row = document.createElement('div');
          row.className = 'flex justify-between mb-4';
          const name = document.createElement('p');
          name.className = 'font-bold';
          name.textContent = item.name;
          const amount = document.createElement('p');
          amount.textContent = money(price(item));
          row.appendChild(name);
          row.appendChild(amount);
          itemsEl.appendChild(row);
        });
        const subtotal = cart.reduce(function (acc, item) { return acc + Number(price(item)); }, 0);
        subtotalEl.textContent = money(subtotal);
        if (countEl) countEl.textContent = cart.length;
      }

      const icon = document.getElementById('cart-icon');
      if (icon) icon.addEventListener('click', toggleCart);
      document.getElementById('close-cart-btn').addEventListener('click', toggleCart);
      backdrop.addEventListener('click', toggleCart);
      document.getElementById('checkout-btn').addEventListener('click', function () {
        if (cart.length > 0) {
          window.parent.postMessage({ action: 'viewCheckout', payload: { cart: cart } }, '*');
        }
      });

      window.nexusAddToCart = function (product) {
        cart.push(product);
        renderCart();
        if (!panel.classList.contains('open')) toggleCart();
      };
    })();
  </script>"""

INTERACTION_SCRIPT = """  <script>
    document.addEventListener('click', function (e) {
      const target = e.target.closest('[data-action]');
      if (!target) return;
      e.preventDefault();
      const action = target.dataset.action;
      if (action === 'addToCart') {
        if (window.nexusAddToCart) window.nexusAddToCart(JSON.parse(target.dataset.product));
        return;
      }
      window.parent.postMessage({ action: action, payload: { id: target.dataset.id } }, '*');
    });
  </script>"""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def escape(text: Any) -> str:
    """HTML-escape user content."""
    return _html_escape(str(text), quote=True)


def script_json(value: Any) -> str:
    """JSON that is safe inside a <script> element: <, > and & are \\u-escaped."""
    text = json.dumps(value, ensure_ascii=True, default=str)
    return text.replace("<", "\\u003c").replace(">", "\\u003e").replace("&", "\\u0026")


def _truncate(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_DOWN)


def _cart_enabled(config: dict[str, Any]) -> bool:
    return bool(config.get("ecommerce", {}).get("cart", {}).get("enabled"))
