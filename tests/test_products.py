import json
from contextlib import contextmanager

from storefront.data.database import SessionLocal
from storefront.data.models.product import ProductModel
from storefront.domain.errors import ConflictError

PRODUCT = "/api/v1/product"

FIELDS = {
    "productName": "Galaxy S",
    "productDesc": "A phone",
    "productPrice": "499.99",
    "category": "Mobile",
    "brand": "Samsung",
}


def _png(name="p.png"):
    return ("files", (name, b"\x89PNG", "image/png"))


def test_add_product_requires_login(client):
    resp = client.post(f"{PRODUCT}/add", data=FIELDS)

    assert resp.status_code == 401


def test_add_product_requires_admin(client, user_auth):
    _, headers = user_auth

    resp = client.post(f"{PRODUCT}/add", data=FIELDS, headers=headers)

    assert resp.status_code == 403
    assert resp.json() == {"success": False, "message": "Admin access only"}


def test_admin_adds_product_with_images(client, admin_auth, media):
    _, headers = admin_auth

    resp = client.post(f"{PRODUCT}/add", data=FIELDS, files=[_png("a.png"), _png("b.png")], headers=headers)

    assert resp.status_code == 201
    product = resp.json()["product"]
    assert product["productName"] == "Galaxy S"
    assert product["productPrice"] == 499.99
    assert [img["publicId"] for img in product["productImg"]] == ["products/img1", "products/img2"]
    assert media.uploaded == ["products/img1", "products/img2"]


def test_add_product_missing_fields(client, admin_auth):
    _, headers = admin_auth

    resp = client.post(f"{PRODUCT}/add", data={**FIELDS, "brand": ""}, headers=headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "All fields are required"


def test_add_product_rejects_bad_price(client, admin_auth):
    _, headers = admin_auth

    for price in ("cheap", "-1"):
        resp = client.post(f"{PRODUCT}/add", data={**FIELDS, "productPrice": price}, headers=headers)
        assert resp.status_code == 400


def test_add_product_caps_image_count(client, admin_auth, media):
    _, headers = admin_auth

    files = [_png(f"{i}.png") for i in range(6)]
    resp = client.post(f"{PRODUCT}/add", data=FIELDS, files=files, headers=headers)

    assert resp.status_code == 400
    assert media.uploaded == []


def test_list_products_is_public_and_newest_first(client, make_product):
    first = make_product("Old")
    second = make_product("New")

    resp = client.get(f"{PRODUCT}/getallproducts")

    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()["products"]] == [second, first]


def test_list_products_filters_and_sorts(client, make_product):
    make_product("iPhone", "900", category="Mobile", brand="Apple")
    make_product("Pixel", "600", category="Mobile", brand="Google")
    make_product("MacBook", "1500", category="Laptop", brand="Apple")

    def names(**params):
        body = client.get(f"{PRODUCT}/getallproducts", params=params).json()
        return [p["productName"] for p in body["products"]]

    assert names(category="Mobile", sort="lowToHigh") == ["Pixel", "iPhone"]
    assert names(brand="Apple", sort="highToLow") == ["MacBook", "iPhone"]
    assert names(search="book") == ["MacBook"]


def test_list_products_rejects_unknown_sort(client):
    assert client.get(f"{PRODUCT}/getallproducts", params={"sort": "random"}).status_code == 400


def test_update_patches_fields_and_images(client, admin_auth, make_product, media):
    _, headers = admin_auth
    images = [
        {"url": "https://cdn.example.com/products/x.png", "public_id": "products/x"},
        {"url": "https://cdn.example.com/products/y.png", "public_id": "products/y"},
    ]
    product_id = make_product("Phone", "100", images=images)

    resp = client.put(
        f"{PRODUCT}/update/{product_id}",
        data={"productPrice": "120", "existingImages": json.dumps(["products/y"])},
        files=[_png()],
        headers=headers,
    )

    assert resp.status_code == 200
    product = resp.json()["product"]
    assert product["productName"] == "Phone"
    assert product["productPrice"] == 120.0
    assert [img["publicId"] for img in product["productImg"]] == ["products/y", "products/img1"]
    assert media.destroyed == ["products/x"]


def test_rejected_update_keeps_hosted_images(client, admin_auth, make_product, media):
    _, headers = admin_auth
    images = [{"url": f"u{i}", "public_id": f"products/p{i}"} for i in range(5)]
    product_id = make_product(images=images)

    resp = client.put(
        f"{PRODUCT}/update/{product_id}",
        data={"existingImages": json.dumps([f"products/p{i}" for i in range(4)])},
        files=[_png("a.png"), _png("b.png")],
        headers=headers,
    )

    assert resp.status_code == 400
    assert media.destroyed == []
    assert media.uploaded == []
    with SessionLocal() as s:
        assert s.get(ProductModel, product_id).product_img == images


def test_bad_price_on_update_uploads_and_destroys_nothing(client, admin_auth, make_product, media):
    _, headers = admin_auth
    product_id = make_product(images=[{"url": "u", "public_id": "products/x"}])

    resp = client.put(
        f"{PRODUCT}/update/{product_id}",
        data={"productPrice": "cheap", "existingImages": "[]"},
        files=[_png()],
        headers=headers,
    )

    assert resp.status_code == 400
    assert media.uploaded == []
    assert media.destroyed == []


def test_update_without_existing_images_keeps_all(client, admin_auth, make_product, media):
    _, headers = admin_auth
    product_id = make_product(images=[{"url": "u", "public_id": "products/x"}])

    resp = client.put(f"{PRODUCT}/update/{product_id}", data={"brand": "Other"}, headers=headers)

    assert resp.status_code == 200
    assert resp.json()["product"]["brand"] == "Other"
    assert [img["publicId"] for img in resp.json()["product"]["productImg"]] == ["products/x"]
    assert media.destroyed == []


def test_update_rejects_malformed_existing_images(client, admin_auth, make_product):
    _, headers = admin_auth
    product_id = make_product()

    resp = client.put(f"{PRODUCT}/update/{product_id}", data={"existingImages": "{oops"}, headers=headers)

    assert resp.status_code == 400


def test_update_missing_product(client, admin_auth):
    _, headers = admin_auth

    assert client.put(f"{PRODUCT}/update/999", data={"brand": "X"}, headers=headers).status_code == 404


def test_price_change_does_not_touch_cart_lines(client, admin_auth, user_auth, make_product):
    _, admin = admin_auth
    _, user = user_auth
    product_id = make_product("Phone", "100")
    client.post("/api/v1/cart/add", json={"productId": product_id}, headers=user)

    client.put(f"{PRODUCT}/update/{product_id}", data={"productPrice": "80"}, headers=admin)

    cart = client.get("/api/v1/cart", headers=user).json()["cart"]
    assert cart["items"][0]["price"] == 100.0
    assert cart["totalPrice"] == 100.0


def test_delete_product_removes_images_and_cart_lines(client, admin_auth, user_auth, make_product, media):
    _, admin = admin_auth
    _, user = user_auth
    doomed = make_product("Doomed", "30", images=[{"url": "u", "public_id": "products/d"}])
    kept = make_product("Kept", "20")
    client.post("/api/v1/cart/add", json={"productId": doomed}, headers=user)
    client.post("/api/v1/cart/add", json={"productId": kept}, headers=user)

    resp = client.delete(f"{PRODUCT}/delete/{doomed}", headers=admin)

    assert resp.status_code == 200
    assert media.destroyed == ["products/d"]
    with SessionLocal() as s:
        assert s.get(ProductModel, doomed) is None
    cart = client.get("/api/v1/cart", headers=user).json()["cart"]
    assert [i["productId"] for i in cart["items"]] == [kept]
    assert cart["totalPrice"] == 20.0


def test_delete_survives_image_host_failure(client, admin_auth, make_product, media):
    _, headers = admin_auth
    product_id = make_product(images=[{"url": "u", "public_id": "products/d"}])
    media.fail_destroy = True

    assert client.delete(f"{PRODUCT}/delete/{product_id}", headers=headers).status_code == 200


def test_delete_missing_product(client, admin_auth):
    _, headers = admin_auth

    assert client.delete(f"{PRODUCT}/delete/999", headers=headers).status_code == 404


def test_failed_cart_purge_keeps_product_and_images(client, admin_auth, user_auth, make_product, media, lock):
    _, admin = admin_auth
    _, user = user_auth
    product_id = make_product(images=[{"url": "u", "public_id": "products/d"}])
    client.post("/api/v1/cart/add", json={"productId": product_id}, headers=user)

    @contextmanager
    def busy(user_id, ttl=None, wait=None):
        raise ConflictError("Cart is being updated, please try again")
        yield

    lock.cart_lock = busy

    resp = client.delete(f"{PRODUCT}/delete/{product_id}", headers=admin)

    assert resp.status_code == 400
    assert media.destroyed == []
    with SessionLocal() as s:
        assert s.get(ProductModel, product_id).product_img == [{"url": "u", "public_id": "products/d"}]
