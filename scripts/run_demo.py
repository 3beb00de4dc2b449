#!/usr/bin/env python3
"""
run_demo.py - End-to-end walk through a running Brew & Co API
- Admin logs in and adds a product
- Customer registers, fills in the profile, fills the cart and checks out
- Admin moves the order along and reads the dashboard stats
"""
import argparse, json, sys, tempfile, uuid
from pathlib import Path

from brewco.client import ApiError, Storefront

def show_step(title: str):
    print(f"\n=== {title} ===")

def mask_token(token: str) -> str:
    if not token:
        return "<none>"
    return token if len(token) <= 12 else f"{token[:8]}...{token[-6:]}"

def dump(data):
    print(json.dumps(data, indent=2, default=str))

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--base-url", default="http://localhost:5000")
    ap.add_argument("--admin-username", default="admin")
    ap.add_argument("--admin-password", required=True)
    args = ap.parse_args()

    suffix = uuid.uuid4().hex[:6]
    workdir = Path(tempfile.mkdtemp(prefix="brewco-demo-"))

    # separate storage files: one shopper, one back-office tab
    with Storefront.open(args.base_url, workdir / "admin.json") as office, \
         Storefront.open(args.base_url, workdir / "shopper.json") as shop:
        show_step("Preflight: health")
        health = shop.api.check_health()
        print(health["message"])
        if not health["ok"]:
            sys.exit(1)

        try:
            show_step("Admin: login")
            admin = office.admin_login(args.admin_username, args.admin_password)
            print(f"Admin token: {mask_token(admin.token)}")

            show_step("Admin: create product")
            product = office.api.admin_create_product(
                admin.token, name=f"Flat White {suffix}", price=3.5, category="hot-coffee",
                description="Velvety milk, perfectly pulled shots.", popular=True, stock=50,
            )
            dump(product)

            show_step("Customer: register")
            customer = shop.register(f"demo_{suffix}", f"demo_{suffix}@example.com", "demo-pass")
            print(f"Customer token: {mask_token(customer.token)}")

            show_step("Customer: complete profile")
            shop.update_profile(full_name="Demo Customer", phone="+10000000000")

            show_step("Customer: add to cart")
            shop.cart.add_item(shop.api.get_product(product["id"]), 2)
            dump(shop.cart.order_summary())

            show_step("Customer: checkout")
            order_id = shop.checkout(notes="demo order")
            print(f"Order #{order_id} placed")
            dump(shop.my_orders())

            show_step("Admin: confirm order")
            dump(office.api.admin_update_order_status(admin.token, order_id, "confirmed"))

            show_step("Admin: stats")
            dump(office.api.admin_stats(admin.token)["overview"])
        except ApiError as e:
            print(f"Error: \033[91m{e}\033[0m", file=sys.stderr)
            sys.exit(1)

    print("\nDemo finished.")

if __name__ == "__main__":
    main()
