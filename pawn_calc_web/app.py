import logging
import os
from datetime import date

from flask import Flask, jsonify, request

from pawn_calc.config import Settings
from pawn_calc.engine import compute_accrual, payment_percentage_label, quick_payment_amounts
from pawn_calc.exceptions import InvalidInputError, RecordNotFoundError
from pawn_calc.formatter import accrual_to_dict, maturity_to_dict
from pawn_calc.loader import loan_from_record, scheme_from_record
from pawn_calc.log_config import setup_logging
from pawn_calc.maturity import compute_maturity, installment_schedule
from pawn_calc.utils import parse_date, to_decimal
from pawn_calc_web.loan_store import LoanStore, create_store_from_env

logger = logging.getLogger(__name__)


def _ok(data, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def _fail(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def _json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return body


def _as_of_from_args():
    value = request.args.get("asOf")
    return parse_date(value, "asOf") if value else None


def _calculation(record: dict, settings: Settings, as_of=None) -> dict:
    """Recompute the loan figures from a freshly fetched record."""
    result = compute_accrual(loan_from_record(record), as_of)
    data = accrual_to_dict(result)
    data["quickPay"] = {
        str(pct): float(amount)
        for pct, amount in quick_payment_amounts(result.total_due, settings.quick_pay_percentages).items()
    }
    return data


def create_app(store: LoanStore = None, settings: Settings = None) -> Flask:
    """Build the Flask app serving loan and savings calculations."""
    settings = settings or Settings.from_env()
    store = store or create_store_from_env(settings.database_url)

    app = Flask(__name__)
    app.config["PAWN_CALC_SETTINGS"] = settings

    @app.errorhandler(InvalidInputError)
    def handle_invalid_input(exc):
        logger.warning("Rejected request to %s: %s", request.path, exc)
        return _fail(str(exc), 400)

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc):
        return _fail(str(exc), 404)

    @app.get("/loans")
    def list_loans():
        return _ok(store.list_loans())

    @app.post("/loans")
    def create_loan():
        body = _json_body()
        # validate through the same path the calculation uses
        loan = loan_from_record({**body, "payments": []})
        record = store.add_loan(
            total_loan_amount=loan.principal,
            interest_rate=loan.monthly_rate_percent,
            start_date=loan.start_date,
            customer_name=str(body.get("customerName", "")),
            loan_id=loan.loan_id,
        )
        return _ok(record, 201)

    @app.get("/loans/<loan_id>")
    def get_loan(loan_id):
        return _ok(store.get_loan(loan_id))

    @app.get("/loans/<loan_id>/calculate")
    def calculate_loan(loan_id):
        return _ok(_calculation(store.get_loan(loan_id), settings, _as_of_from_args()))

    @app.post("/loans/<loan_id>/payments")
    def add_payment(loan_id):
        body = _json_body()
        amount = to_decimal(body.get("amount"), "amount")
        if amount <= 0:
            raise InvalidInputError("Please enter a valid payment amount")
        paid_on = parse_date(body["date"], "date") if body.get("date") else date.today()
        payment_type = str(body.get("paymentType", "Cash"))
        notes = str(body.get("notes", ""))

        record = store.get_loan(loan_id)
        percentage = None
        if payment_type == "Partial":
            before = compute_accrual(loan_from_record(record), paid_on)
            percentage = payment_percentage_label(amount, before.total_due)

        # the loan must still compute with the payment before anything is written
        new_payment = {"amount": str(amount), "date": paid_on.isoformat(), "paymentType": payment_type, "notes": notes}
        compute_accrual(loan_from_record({**record, "payments": record["payments"] + [new_payment]}))

        record = store.add_payment(
            loan_id,
            amount=amount,
            payment_date=paid_on,
            payment_type=payment_type,
            notes=notes,
            payment_percentage=percentage,
        )
        calculation = _calculation(record, settings)
        if calculation["paidInFull"] and record["status"] == "Active":
            store.set_loan_status(loan_id, "Closed")
            record = store.get_loan(loan_id)
        return _ok({"loan": record, "calculation": calculation}, 201)

    @app.post("/savings")
    def create_scheme():
        body = _json_body()
        scheme = scheme_from_record(body)
        record = store.add_scheme(
            installment_amount=scheme.installment_amount,
            duration=scheme.duration,
            bonus_amount=scheme.bonus_amount,
            bonus_percentage=scheme.bonus_percentage,
            start_date=scheme.start_date,
            customer_name=str(body.get("customerName", "")),
            scheme_id=scheme.scheme_id,
        )
        return _ok(record, 201)

    @app.get("/savings/<scheme_id>")
    def get_scheme(scheme_id):
        return _ok(store.get_scheme(scheme_id))

    @app.get("/savings/<scheme_id>/maturity")
    def scheme_maturity(scheme_id):
        scheme = scheme_from_record(store.get_scheme(scheme_id))
        data = maturity_to_dict(compute_maturity(scheme))
        if scheme.start_date is not None:
            data["installments"] = [
                {"index": i.index, "dueDate": i.due_date.isoformat(), "amount": float(i.amount)}
                for i in installment_schedule(scheme)
            ]
        return _ok(data)

    return app


if __name__ == "__main__":
    app_settings = Settings.from_env()
    setup_logging(app_settings.log_level)
    print("Starting pawn calculator API...")
    create_app(settings=app_settings).run(host="0.0.0.0", port=int(os.environ.get("PORT", "8710")), debug=True)
