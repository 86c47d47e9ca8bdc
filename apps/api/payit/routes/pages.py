from __future__ import annotations

from dataclasses import dataclass
from html import escape

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from payit.core.config import ProductConfig
from payit.core.deps import ConfigDep

router = APIRouter()


@dataclass(frozen=True)
class CheckoutPageData:
    product_name: str
    product_description: str
    price_display: str
    currency: str


def format_price(price_cents: int) -> str:
    return f"${price_cents // 100}.{price_cents % 100:02d}"


def checkout_page_data(product: ProductConfig) -> CheckoutPageData:
    return CheckoutPageData(
        product_name=product.name,
        product_description=product.description,
        price_display=format_price(product.price_cents),
        currency=product.currency.upper(),
    )


_PAGE = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{name}</title>
</head>
<body>
<main>
<h1>{name}</h1>
<p>{description}</p>
<p><strong>{price}</strong> {currency}</p>
<label>Quantity <input id="quantity" type="number" min="1" value="1"></label>
<button id="checkout">Checkout</button>
<p id="error" role="alert" hidden>Checkout is unavailable right now. Please try again.</p>
</main>
<script>
document.getElementById("checkout").addEventListener("click", async () => {{
  const error = document.getElementById("error");
  error.hidden = true;
  const quantity = parseInt(document.getElementById("quantity").value, 10) || 1;
  try {{
    const res = await fetch("/api/checkout", {{
      method: "POST",
      headers: {{"Content-Type": "application/json"}},
      body: JSON.stringify({{quantity}}),
    }});
    if (!res.ok) throw new Error(String(res.status));
    const session = await res.json();
    window.location.assign(session.url);
  }} catch (_) {{
    error.hidden = false;
  }}
}});
</script>
</body>
</html>
"""


def render_checkout_page(data: CheckoutPageData) -> str:
    return _PAGE.format(
        name=escape(data.product_name),
        description=escape(data.product_description),
        price=escape(data.price_display),
        currency=escape(data.currency),
    )


@router.get("/", response_class=HTMLResponse)
async def checkout_page(config: ConfigDep) -> HTMLResponse:
    return HTMLResponse(render_checkout_page(checkout_page_data(config.product)))
