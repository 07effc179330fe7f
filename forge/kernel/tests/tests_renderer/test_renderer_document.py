"""
NexusForge Renderer -- Storefront Document

render_site over the marketplace templates and hand-edited configs.

This verifies:
  - The default view is the first page
  - Navigation has one link per page; the cart icon follows cart.enabled
  - Sections appear only when enabled, in their configured order
  - Product detail, checkout and confirmation views
  - Every user-authored string is HTML-escaped
  - Inline JSON cannot close its <script> element
  - Custom CSS cannot close the <style> element
  - Invalid theme values fall back to the preset
  - Determinism
"""

import json

import pytest

from forge.kernel.defaults import website_config
from forge.kernel.paths import apply_update
from forge.kernel.renderer import render_site, script_json
from forge.kernel.types import CheckoutPreview, OrderSuccessPreview, PagePreview, ProductPreview

SITE = "Quantum"


def render(config, preview=None, site_name=SITE):
    return render_site(config, preview, site_name=site_name)


def order_data(html):
    start = html.index('id="nf-order-data">') + len('id="nf-order-data">')
    end = html.index("</script>", start)
    return json.loads(html[start:end])


# ============================================================================
# Pages
# ============================================================================


class TestPages:
    def test_default_view_is_first_page(self):
        html = render(website_config("quantum"))
        assert html.startswith("<!DOCTYPE html>")
        assert "Welcome to Quantum" in html
        assert "<title>Quantum Tech Store</title>" in html
        assert 'class="theme-modern"' in html

    def test_one_nav_link_per_page(self):
        config = website_config("quantum")
        assert render(config).count('data-action="navigate"') == 1

        extra = {"id": "faq", "title": "FAQ", "path": "/faq", "sections": {}}
        config = apply_update(config, ["pages"], [*config["pages"], extra])
        html = render(config)
        assert html.count('data-action="navigate"') == 2
        assert 'data-id="faq">FAQ</a>' in html

    def test_unknown_page(self):
        html = render(website_config(), PagePreview("missing"))
        assert "Page not found" in html
        assert "Welcome to Quantum" not in html

    def test_disabled_section_absent(self):
        config = website_config("quantum")
        assert "About Us" not in render(config)
        config = apply_update(config, ["pages", 0, "sections", "about", "enabled"], True)
        assert "About Us" in render(config)

    def test_section_order(self):
        config = website_config("quantum")
        html = render(config)
        assert html.index("Welcome to Quantum") < html.index("All rights reserved")

        config = apply_update(config, ["pages", 0, "sections", "hero", "order"], 9)
        config = apply_update(config, ["pages", 0, "sections", "footer", "order"], 0)
        html = render(config)
        assert html.index("All rights reserved") < html.index("Welcome to Quantum")

    def test_catalog_grouped_by_category(self):
        html = render(website_config("quantum"))
        assert html.index("Processors") < html.index("Astro-Gears") < html.index("Gaming")
        assert html.index("Gaming") < html.index("Retro Gaming Console")
        assert html.count('data-action="viewProduct"') == 3

    def test_uncategorised_products_last(self):
        config = website_config("quantum")
        loose = {"id": "prod_9", "name": "Mystery Box", "price": 5, "productType": "physical", "categoryId": ""}
        config = apply_update(config, ["products"], [loose, *config["products"]])
        html = render(config)
        assert html.index("Retro Gaming Console") < html.index("Mystery Box")

    def test_sale_price_in_card(self):
        html = render(website_config("quantum"))
        assert "$449.99" in html
        assert "$499.99" in html


# ============================================================================
# Cart
# ============================================================================


class TestCartGating:
    def test_cart_enabled(self):
        config = website_config("quantum")
        html = render(config)
        assert 'id="cart-icon"' in html
        assert 'id="cart-panel"' in html
        assert "Add to Cart" in render(config, ProductPreview("prod_1"))

    def test_cart_disabled(self):
        config = apply_update(website_config("quantum"), ["ecommerce", "cart", "enabled"], False)
        html = render(config)
        assert 'id="cart-icon"' not in html
        assert 'id="cart-panel"' not in html
        assert "Add to Cart" not in render(config, ProductPreview("prod_1"))

    def test_cart_panel_truncates_like_checkout(self):
        html = render(website_config("quantum"))
        assert "Math.floor(Math.round(Number(amount) * 10000) / 100)" in html
        assert "amount.textContent = money(price(item));" in html
        assert "subtotalEl.textContent = money(subtotal);" in html
        assert "Number(price(item)).toFixed(2)" not in html
        assert "subtotal.toFixed(2)" not in html

    def test_no_direct_parent_calls(self):
        html = render(website_config("quantum"), ProductPreview("prod_1"))
        assert "window.parent.addToCart" not in html
        assert "window.parent.postMessage" in html


# ============================================================================
# Product detail
# ============================================================================


class TestProductView:
    def test_sale_price(self):
        html = render(website_config("quantum"), ProductPreview("prod_2"))
        assert "Cyber-Core License" in html
        assert "$449.99" in html
        assert "line-through" in html
        assert "$499.99" in html

    def test_layout(self):
        config = website_config("quantum")
        assert 'class="grid md:grid-cols-2 gap-8 items-start"' in render(config, ProductPreview("prod_1"))
        config = apply_update(config, ["productPageLayout"], "image-top")
        assert 'class="grid md:grid-cols-1 gap-4 items-start"' in render(config, ProductPreview("prod_1"))

    def test_variants(self):
        config = website_config("quantum")
        variants = [{"type": "Size", "options": ["S", "M"]}]
        product = {**config["products"][0], "variants": variants}
        config = apply_update(config, ["products", 0], product)
        html = render(config, ProductPreview("prod_1"))
        assert "<option>S</option><option>M</option>" in html

    def test_product_payload_escaped_in_attribute(self):
        html = render(website_config("quantum"), ProductPreview("prod_2"))
        assert "&quot;id&quot;: &quot;prod_2&quot;" in html

    def test_unknown_product(self):
        assert "Product not found" in render(website_config(), ProductPreview("nope"))


# ============================================================================
# Checkout and confirmation
# ============================================================================


class TestCheckoutView:
    CART = (
        {"id": "a", "name": "Gadget", "price": 10, "salePrice": 8, "productType": "physical"},
        {"id": "b", "name": "License", "price": 20, "productType": "digital"},
    )

    def test_totals(self):
        html = render(website_config(), CheckoutPreview(self.CART))
        assert 'id="checkout-subtotal">$28.00<' in html
        assert 'id="checkout-shipping">$4.99<' in html
        assert 'id="checkout-total">$32.99<' in html

    def test_shipping_form_only_for_physical(self):
        assert 'id="shipping-address-form"' in render(website_config(), CheckoutPreview(self.CART))
        digital = CheckoutPreview((self.CART[1],))
        assert 'id="shipping-address-form"' not in render(website_config(), digital)

    def test_order_data(self):
        data = order_data(render(website_config(), CheckoutPreview(self.CART)))
        assert data["total"] == 32.99
        assert data["needsShipping"] is True
        assert [item["id"] for item in data["items"]] == ["a", "b"]

    def test_place_order_message(self):
        html = render(website_config(), CheckoutPreview(self.CART))
        assert "action: 'placeOrder'" in html

    def test_order_success(self):
        html = render(website_config(), OrderSuccessPreview())
        assert "Thank You!" in html
        assert 'data-action="navigate" data-id="home" class=' in html


# ============================================================================
# Escaping
# ============================================================================


class TestEscaping:
    def test_site_name(self):
        config = apply_update(website_config(), ["seo", "metaTitle"], "")
        html = render(config, site_name="<script>alert(1)</script>")
        assert "<script>alert(1)" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html

    def test_hero_text(self):
        config = apply_update(website_config(), ["pages", 0, "sections", "hero", "title"], "<b>Big</b> & bold")
        html = render(config)
        assert "&lt;b&gt;Big&lt;/b&gt; &amp; bold" in html
        assert "<b>Big</b>" not in html

    def test_attribute_quotes(self):
        config = apply_update(website_config(), ["products", 0, "name"], 'Gears "Pro"')
        html = render(config)
        assert 'alt="Gears &quot;Pro&quot;"' in html

    def test_page_title_in_nav(self):
        config = apply_update(website_config(), ["pages", 0, "title"], "Home & <Away>")
        assert "Home &amp; &lt;Away&gt;</a>" in render(config)

    def test_order_data_cannot_close_script(self):
        cart = ({"id": "x", "name": "</script><script>alert(1)</script>", "price": 1},)
        html = render(website_config(), CheckoutPreview(cart))
        assert "<script>alert(1)" not in html
        assert order_data(html)["items"][0]["name"] == "</script><script>alert(1)</script>"

    def test_script_json(self):
        value = {"a": "</script>&<b>"}
        text = script_json(value)
        assert "<" not in text
        assert ">" not in text
        assert "&" not in text
        assert json.loads(text) == value


# ============================================================================
# Style
# ============================================================================


class TestStyle:
    def test_custom_css_cannot_close_style(self):
        config = apply_update(website_config(), ["customCss"], "h1 { color: red; }</style><script>alert(1)</script>")
        html = render(config)
        assert html.count("</style>") == 1
        assert "<\\/style>" in html
        assert "h1 { color: red; }" in html

    def test_theme_colours_applied(self):
        config = apply_update(website_config(), ["theme", "primaryColor"], "#ff00aa")
        assert "color: #ff00aa;" in render(config)

    def test_invalid_colour_falls_back(self):
        config = apply_update(website_config(), ["theme", "primaryColor"], "red; } body { display:none")
        html = render(config)
        assert "display:none" not in html
        assert "#3b82f6" in html

    def test_invalid_font_falls_back(self):
        config = apply_update(website_config(), ["theme", "font"], "Comic'); } evil {")
        html = render(config)
        assert "evil" not in html
        assert "font-family: 'Inter', sans-serif;" in html

    def test_bold_template(self):
        html = render(website_config("ember"), site_name="Ember")
        assert 'class="theme-bold"' in html
        assert "text-transform: uppercase" in html
        assert "EMBER GRILL" in html

    def test_unknown_template_uses_modern(self):
        config = apply_update(website_config(), ["template"], "neon")
        assert 'class="theme-modern"' in render(config)


# ============================================================================
# Purity
# ============================================================================


class TestPurity:
    @pytest.mark.parametrize(
        "preview",
        [None, PagePreview("home"), ProductPreview("prod_2"), OrderSuccessPreview()],
    )
    def test_deterministic(self, preview):
        config = website_config("quantum")
        assert render(config, preview) == render(config, preview)

    def test_config_not_mutated(self):
        config = website_config("quantum")
        before = json.dumps(config, sort_keys=True)
        render(config, CheckoutPreview(({"id": "a", "price": 1},)))
        assert json.dumps(config, sort_keys=True) == before

    def test_unknown_preview_state(self):
        with pytest.raises(TypeError):
            render(website_config(), "page")
