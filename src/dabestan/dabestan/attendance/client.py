"""Gateways the attendance sheet talks through.

``HttpAttendanceGateway`` speaks the JSON API over ``requests``;
``LocalAttendanceGateway`` calls ``AttendanceService`` in-process. Both raise
``GatewayError`` for anything the sheet should surface to the user.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol, Sequence

import requests
from requests.exceptions import RequestException

from ..core.enums import AttendanceStatus
from ..core.exceptions import DomainError
from .model import MarkResult, RosterEntry
from .service import AttendanceService


class GatewayError(Exception):
    """The backend could not be reached or refused the request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AttendanceGateway(Protocol):
    def load_roster(self, attendance_date: date, class_id: Optional[int] = None) -> Sequence[RosterEntry]:
        raise NotImplementedError

    def mark(
        self,
        student_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        notes: Optional[str] = None,
        class_id: Optional[int] = None,
    ) -> None:
        raise NotImplementedError

    def bulk(self, attendance_date: date, updates: list[dict], class_id: Optional[int] = None) -> Sequence[MarkResult]:
        raise NotImplementedError

    def export(
        self,
        attendance_date: date,
        class_id: Optional[int] = None,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> bytes:
        raise NotImplementedError


def _result_from_dict(item: dict) -> MarkResult:
    status = item.get("status")
    return MarkResult(
        student_id=int(item.get("studentId") or 0),
        success=bool(item.get("success")),
        status=AttendanceStatus(status) if status else None,
        error=item.get("error"),
    )


class LocalAttendanceGateway(AttendanceGateway):
    def __init__(self, service: AttendanceService):
        self._service = service

    def load_roster(self, attendance_date, class_id=None):
        try:
            return list(self._service.roster_entries(attendance_date, class_id))
        except DomainError as e:
            raise GatewayError(str(e))

    def mark(self, student_id, attendance_date, status, notes=None, class_id=None):
        try:
            self._service.mark(student_id, attendance_date, status, notes, class_id)
        except DomainError as e:
            raise GatewayError(str(e))

    def bulk(self, attendance_date, updates, class_id=None):
        try:
            return self._service.bulk_mark(attendance_date, updates, class_id).results
        except DomainError as e:
            raise GatewayError(str(e))

    def export(self, attendance_date, class_id=None, search=None, status=None):
        try:
            return self._service.export(attendance_date, class_id, search, status)
        except DomainError as e:
            raise GatewayError(str(e))


class HttpAttendanceGateway(AttendanceGateway):
    def __init__(self, base_url: str, *, session: Optional[requests.Session] = None, timeout: int = 15):
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self._base_url}{path}"
        try:
            return self._session.request(method, url, timeout=self._timeout, **kwargs)
        except RequestException as e:
            raise GatewayError(f"خطا در ارتباط با سرور: {type(e).__name__}")

    @staticmethod
    def _json(r: requests.Response) -> dict[str, Any]:
        try:
            body = r.json()
        except ValueError:
            raise GatewayError(f"پاسخ نامعتبر از سرور ({r.status_code})", r.status_code)
        if not isinstance(body, dict):
            raise GatewayError(f"پاسخ نامعتبر از سرور ({r.status_code})", r.status_code)
        return body

    def _checked(self, r: requests.Response) -> dict[str, Any]:
        body = self._json(r)
        if r.status_code >= 400:
            raise GatewayError(body.get("error") or f"HTTP {r.status_code}", r.status_code)
        return body

    def login(self, username: str, password: str) -> dict:
        r = self._request("POST", "/api/auth/login", json={"username": username, "password": password})
        return self._checked(r).get("data") or {}

    def load_roster(self, attendance_date, class_id=None):
        params: dict[str, Any] = {"date": attendance_date.isoformat()}
        if class_id is not None:
            params["classId"] = class_id
        body = self._checked(self._request("GET", "/api/attendance/roster", params=params))

        entries: list[RosterEntry] = []
        for klass in (body.get("data") or {}).get("classes", []):
            for s in klass.get("students", []):
                status = s.get("attendance_status")
                entries.append(
                    RosterEntry(
                        student_id=int(s["id"]),
                        student_code=s["studentId"],
                        first_name=s["firstName"],
                        last_name=s["lastName"],
                        national_id=s["nationalId"],
                        class_id=int(klass["id"]),
                        grade=int(klass["grade"]),
                        section=klass["section"],
                        status=AttendanceStatus(status) if status else None,
                        notes=s.get("notes"),
                    )
                )
        return entries

    def mark(self, student_id, attendance_date, status, notes=None, class_id=None):
        payload = {
            "studentId": student_id,
            "classId": class_id,
            "date": attendance_date.isoformat(),
            "status": AttendanceStatus(status).value,
            "notes": notes,
        }
        self._checked(self._request("POST", "/api/attendance/mark", json=payload))

    def bulk(self, attendance_date, updates, class_id=None):
        payload = {"date": attendance_date.isoformat(), "classId": class_id, "updates": updates}
        r = self._request("POST", "/api/attendance/bulk", json=payload)
        body = self._json(r)
        data = body.get("data") or {}
        if r.status_code >= 400 or "results" not in data:
            raise GatewayError(body.get("error") or f"HTTP {r.status_code}", r.status_code)
        return [_result_from_dict(item) for item in data["results"]]

    def export(self, attendance_date, class_id=None, search=None, status=None):
        params: dict[str, Any] = {"date": attendance_date.isoformat()}
        if class_id is not None:
            params["classId"] = class_id
        if search:
            params["search"] = search
        if status:
            params["status"] = status
        r = self._request("GET", "/api/attendance/export", params=params)
        if r.status_code != 200:
            self._checked(r)
            raise GatewayError(f"HTTP {r.status_code}", r.status_code)
        return r.content
