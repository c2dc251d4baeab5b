import pytest
from sqlalchemy.exc import IntegrityError

from resumeboost.db.models import PaymentTransactionModel
from resumeboost.schemas import OrderRequest
from resumeboost.services.catalog import build_catalog
from resumeboost.services.errors import CouponAlreadyUsed, UpstreamError
from resumeboost.services.order_service import OrderService
from resumeboost.services.payment_gateway import RazorpayGateway
from resumeboost.services.transaction_repository import TransactionRepository


def create_repo(database_url):
    return TransactionRepository(database_url=database_url)


def add_pending(repo, user_id="user-1", coupon_code=None, final_amount=64000):
    return repo.create_pending(
        user_id=user_id,
        plan_id="starter_plan",
        amount=64000,
        currency="INR",
        coupon_code=coupon_code,
        discount_amount=64000 - final_amount,
        final_amount=final_amount,
        purchase_type="plan",
    )


def test_create_and_fetch_transaction(database_url):
    repo = create_repo(database_url)

    created = add_pending(repo, coupon_code="diwali", final_amount=6400)
    repo.attach_gateway_order(created.id, "order_abc")

    fetched = repo.get_by_id(created.id)
    assert fetched is not None
    assert fetched.status == "pending"
    assert fetched.final_amount == 6400
    assert fetched.gateway_order_id == "order_abc"
    assert fetched.created_at is not None


def test_mark_failed_releases_coupon_for_the_user(database_url):
    repo = create_repo(database_url)
    created = add_pending(repo, coupon_code="diwali")

    assert repo.count_user_coupon_usage("user-1", "DIWALI") == 1
    assert repo.count_coupon_usage("diwali") == 1

    repo.mark_failed(created.id)

    assert repo.get_by_id(created.id).status == "failed"
    assert repo.count_user_coupon_usage("user-1", "diwali") == 0
    assert repo.count_coupon_usage("diwali") == 0


def test_successful_transactions_count_as_redemptions(database_url):
    repo = create_repo(database_url)
    first = add_pending(repo, user_id="user-1", coupon_code="first500")
    add_pending(repo, user_id="user-2", coupon_code="first500")
    repo.set_status(first.id, "success")

    assert repo.count_coupon_usage("first500") == 2


def test_active_coupon_is_unique_per_user(database_url):
    repo = create_repo(database_url)
    add_pending(repo, coupon_code="diwali")

    with pytest.raises(IntegrityError):
        add_pending(repo, coupon_code="diwali")

    # Orders without a coupon are unrestricted.
    add_pending(repo)
    add_pending(repo)


def test_concurrent_redemption_surfaces_as_coupon_already_used(database_url):
    repo = create_repo(database_url)
    add_pending(repo, coupon_code="diwali", final_amount=6400)

    class StaleUsageRepository(TransactionRepository):
        def count_user_coupon_usage(self, user_id, coupon_code):
            return 0

    class UnusedGateway:
        key_id = "rzp_test_key"

        def create_order(self, *args, **kwargs):
            raise AssertionError("gateway must not be called")

    catalog = build_catalog(
        {
            "plans": [{"id": "starter_plan", "name": "Starter Plan", "price": 640}],
            "coupons": [{"code": "diwali", "planId": None, "kind": "percentage", "percent": 90}],
        }
    )
    service = OrderService(
        catalog=catalog,
        transactions=StaleUsageRepository(database_url=database_url),
        gateway=UnusedGateway(),
    )

    with pytest.raises(CouponAlreadyUsed):
        service.create_order(OrderRequest(planId="starter_plan", couponCode="diwali", amount=6400), "user-1")


def test_malformed_gateway_response_marks_stored_transaction_failed(database_url):
    class ListResponse:
        status_code = 200
        text = "[]"

        def json(self):
            return []

    class ListSession:
        def post(self, url, **kwargs):
            return ListResponse()

    repo = create_repo(database_url)
    gateway = RazorpayGateway(
        key_id="rzp_test_key",
        key_secret="secret",
        api_url="https://api.razorpay.test/v1/orders",
        timeout=5,
        session=ListSession(),
    )
    catalog = build_catalog({"plans": [{"id": "starter_plan", "name": "Starter Plan", "price": 640}]})
    service = OrderService(catalog=catalog, transactions=repo, gateway=gateway)

    with pytest.raises(UpstreamError):
        service.create_order(OrderRequest(planId="starter_plan", amount=64000), "user-1")

    with repo.session_scope() as session:
        statuses = [row.status for row in session.query(PaymentTransactionModel).all()]
    assert statuses == ["failed"]
