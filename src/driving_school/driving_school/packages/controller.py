from __future__ import annotations

from decimal import Decimal

from flask import Flask, jsonify, request

from ..common.web import SessionIdentityProvider, error_response, login_required
from ..container import Container
from ..core.enums import PackageStatus
from ..core.exceptions import ValidationError


def _package_status(value) -> PackageStatus | None:
    if not value or value == "all":
        return None
    try:
        return PackageStatus(value)
    except ValueError:
        raise ValidationError("Unknown package status")


def register(app: Flask, container: Container) -> None:
    identity = SessionIdentityProvider()

    @app.route("/api/packages", methods=["GET"], endpoint="packages_list")
    @login_required
    def packages_list():
        try:
            status = _package_status(request.args.get("status", PackageStatus.ACTIVE.value))
            packages = container.package_service.list_for_staff(context=identity.current(), status=status)
            out = []
            for p in packages:
                snapshot = container.ledger_service.recompute(p.package_id)
                out.append({"package_id": p.package_id, "status": p.status.value, **snapshot.as_dict()})
            return jsonify({"packages": out})
        except Exception as e:
            return error_response(e)

    @app.route("/api/packages", methods=["POST"], endpoint="packages_open")
    @login_required
    def packages_open():
        try:
            payload = request.get_json(silent=True) or {}
            opened = container.package_service.open_package(
                context=identity.current(),
                client_id=payload.get("client_id"),
                course_id=payload.get("course_id"),
                instructor_id=payload.get("instructor_id"),
                use_discount=bool(payload.get("use_discount")),
                amount_paid_today=payload.get("amount_paid_today") or Decimal("0"),
            )
            return jsonify({"package_id": opened.package_id, "ledger": opened.ledger.as_dict()}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/packages/<int:package_id>/ledger", methods=["GET"], endpoint="package_ledger")
    @login_required
    def package_ledger(package_id: int):
        try:
            return jsonify(container.ledger_service.recompute(package_id).as_dict())
        except Exception as e:
            return error_response(e)

    @app.route("/api/packages/<int:package_id>/archive", methods=["POST"], endpoint="package_archive")
    @login_required
    def package_archive(package_id: int):
        try:
            container.package_service.archive(package_id=package_id)
            return jsonify({"package_id": package_id, "status": PackageStatus.ARCHIVED.value})
        except Exception as e:
            return error_response(e)

    @app.route("/api/packages/<int:package_id>/instructor", methods=["POST"], endpoint="package_assign")
    @login_required
    def package_assign(package_id: int):
        try:
            payload = request.get_json(silent=True) or {}
            container.package_service.assign_instructor(
                context=identity.current(),
                package_id=package_id,
                instructor_id=payload.get("instructor_id"),
            )
            return jsonify({"package_id": package_id, "instructor_id": payload.get("instructor_id")})
        except Exception as e:
            return error_response(e)

    @app.route("/api/packages/<int:package_id>/payments", methods=["GET"], endpoint="package_payment_form")
    @login_required
    def package_payment_form(package_id: int):
        try:
            amount = container.payment_service.suggested_amount(package_id)
            return jsonify({"package_id": package_id, "suggested_amount": str(amount)})
        except Exception as e:
            return error_response(e)

    @app.route("/api/packages/<int:package_id>/payments", methods=["POST"], endpoint="package_payment_record")
    @login_required
    def package_payment_record(package_id: int):
        try:
            payload = request.get_json(silent=True) or {}
            payment_id, snapshot = container.payment_service.record(
                context=identity.current(),
                package_id=package_id,
                amount=payload.get("amount"),
                method=payload.get("method") or "cash",
                plan=payload.get("plan") or "full",
                status=payload.get("status") or "completed",
                notes=payload.get("notes"),
            )
            return jsonify({"payment_id": payment_id, "ledger": snapshot.as_dict()}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/payments/<int:payment_id>", methods=["PUT"], endpoint="payment_update")
    @login_required
    def payment_update(payment_id: int):
        try:
            payload = request.get_json(silent=True) or {}
            snapshot = container.payment_service.update(
                payment_id=payment_id,
                package_id=payload.get("package_id"),
                amount=payload.get("amount"),
                method=payload.get("method") or "cash",
                plan=payload.get("plan") or "full",
                status=payload.get("status") or "completed",
                notes=payload.get("notes"),
            )
            return jsonify({"payment_id": payment_id, "ledger": snapshot.as_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/payments/<int:payment_id>", methods=["DELETE"], endpoint="payment_delete")
    @login_required
    def payment_delete(payment_id: int):
        try:
            snapshot = container.payment_service.delete(payment_id=payment_id)
            return jsonify({"payment_id": payment_id, "ledger": snapshot.as_dict()})
        except Exception as e:
            return error_response(e)
