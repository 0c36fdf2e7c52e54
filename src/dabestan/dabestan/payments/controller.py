from __future__ import annotations

from flask import Flask, request

from ..common.web import json_body, ok, permission_required
from ..core.enums import Action, Resource
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.payment_service

    @app.route("/api/payments", methods=["GET"], endpoint="list_payments")
    @permission_required(Resource.PAYMENT, Action.VIEW)
    def list_payments():
        payments = service.list(student_id=request.args.get("studentId"), status=request.args.get("status"))
        today = service.today()
        return ok({"payments": [p.to_dict(today) for p in payments]})

    @app.route("/api/payments", methods=["POST"], endpoint="create_payment")
    @permission_required(Resource.PAYMENT, Action.CREATE)
    def create_payment():
        payment = service.create(json_body())
        return ok({"payment": payment.to_dict(service.today())}, "پرداخت با موفقیت ثبت شد", 201)

    @app.route("/api/payments/<int:payment_id>", methods=["PUT"], endpoint="update_payment")
    @permission_required(Resource.PAYMENT, Action.UPDATE)
    def update_payment(payment_id: int):
        payment = service.update(payment_id, json_body())
        return ok({"payment": payment.to_dict(service.today())}, "پرداخت بروزرسانی شد")

    @app.route("/api/payments/<int:payment_id>/pay", methods=["POST"], endpoint="pay_payment")
    @permission_required(Resource.PAYMENT, Action.UPDATE)
    def pay_payment(payment_id: int):
        payment = service.mark_paid(payment_id, json_body().get("paidDate"))
        return ok({"payment": payment.to_dict(service.today())}, "پرداخت ثبت شد")

    @app.route("/api/payments/<int:payment_id>/cancel", methods=["POST"], endpoint="cancel_payment")
    @permission_required(Resource.PAYMENT, Action.UPDATE)
    def cancel_payment(payment_id: int):
        payment = service.cancel(payment_id)
        return ok({"payment": payment.to_dict(service.today())}, "پرداخت لغو شد")

    @app.route("/api/payments/<int:payment_id>", methods=["DELETE"], endpoint="delete_payment")
    @permission_required(Resource.PAYMENT, Action.DELETE)
    def delete_payment(payment_id: int):
        service.delete(payment_id)
        return ok(message="پرداخت حذف شد")

    @app.route("/api/financial/overdue-count", methods=["GET"], endpoint="overdue_count")
    @permission_required(Resource.PAYMENT, Action.VIEW)
    def overdue_count():
        return ok(service.overdue_summary())
