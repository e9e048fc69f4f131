#!/usr/bin/env python3
"""Live smoke suite for the FairLend API.

Walks the whole decision -> appeal -> review -> notification lifecycle
against a running server instance.

Prerequisites:
  - API server running on localhost:8000 with AUTH_DISABLED=true
  - Database migrated (cd packages/db && alembic upgrade head)
  - LLM endpoint configured (LLM_API_KEY) for the decision section

Usage:
  ./scripts/live-tests.py                  # full suite
  ./scripts/live-tests.py --no-ai          # skip sections that call the model
"""

import argparse
import asyncio
import sys

import httpx

BASE = "http://localhost:8000"
HEADERS = {"Origin": "http://localhost:5173"}

# ---------------------------------------------------------------------------
# Test runner
# ---------------------------------------------------------------------------

PASS = 0
FAIL = 0
ERRORS: list[str] = []
SECTION = ""


def section(name: str):
    global SECTION
    SECTION = name
    print(f"\n{'=' * 60}")
    print(f"  {name}")
    print(f"{'=' * 60}\n")


def ok(name: str, passed: bool, detail: str = ""):
    global PASS, FAIL
    if passed:
        PASS += 1
        print(f"  PASS  {name}")
    else:
        FAIL += 1
        msg = f"[{SECTION}] {name}: {detail}" if detail else f"[{SECTION}] {name}"
        ERRORS.append(msg)
        print(f"  FAIL  {name} -- {detail}")


def has_keys(d: dict, *keys: str) -> bool:
    return all(k in d for k in keys)


# Weak profile so the model is very likely to reject, which makes it appealable.
WEAK_APPLICATION = {
    "name": "Live Test Applicant",
    "age": 29,
    "gender": "male",
    "income": 0,
    "creditScore": 300,
    "loanAmount": 50000,
    "loanTermMonths": 12,
    "loanPurpose": "debt consolidation",
    "employmentStatus": "unemployed",
    "existingLoans": 40000,
    "savingsBalance": 0,
}


# ---------------------------------------------------------------------------
# 1. Health
# ---------------------------------------------------------------------------

async def test_health(c: httpx.AsyncClient):
    section("Health")

    r = await c.get("/health/")
    ok("GET /health/ returns 200", r.status_code == 200)
    ok("health has status and version", has_keys(r.json(), "status", "version"))

    r = await c.get("/health/ready")
    ok("GET /health/ready returns 200", r.status_code == 200, f"got {r.status_code}")

    r = await c.get("/")
    ok("GET / root returns 200", r.status_code == 200)


# ---------------------------------------------------------------------------
# 2. Decision
# ---------------------------------------------------------------------------

async def test_decision(c: httpx.AsyncClient) -> int | None:
    section("AI decision")

    r = await c.post("/api/applications/", json=WEAK_APPLICATION)
    if r.status_code in (402, 429):
        ok("AI gateway available", False, f"{r.status_code} {r.json().get('kind')}")
        return None
    ok("POST /api/applications/ returns 201", r.status_code == 201, r.text[:200])
    if r.status_code != 201:
        return None

    body = r.json()
    ok("decision has all fields",
       has_keys(body, "prediction", "confidence", "fairnessScore", "explanation", "applicationId"))
    ok("prediction is Approved or Rejected", body["prediction"] in ("Approved", "Rejected"))
    ok("confidence in range", 0 <= body["confidence"] <= 100)
    ok("fairness score in range", 0 <= body["fairnessScore"] <= 100)
    ok("explanation non-empty", bool(body["explanation"].strip()))

    app_id = body["applicationId"]
    r = await c.get(f"/api/applications/{app_id}")
    ok("stored application readable", r.status_code == 200)
    ok("stored prediction matches", r.json().get("prediction") == body["prediction"])

    if body["prediction"] == "Approved":
        r = await c.get("/api/applications/approved", params={"limit": 100})
        ids = [loan["applicationId"] for loan in r.json().get("data", [])]
        ok("approved loan scheduled", app_id in ids)
        return None
    return app_id


# ---------------------------------------------------------------------------
# 3. Appeal lifecycle
# ---------------------------------------------------------------------------

async def test_appeal_lifecycle(c: httpx.AsyncClient, app_id: int):
    section("Appeal lifecycle")

    r = await c.post("/api/appeals/", json={"loanId": app_id})
    ok("file appeal returns 201", r.status_code == 201, r.text[:200])
    appeal_id = r.json().get("appealId")

    r = await c.post("/api/appeals/", json={"loanId": app_id})
    ok("second pending appeal is 409", r.status_code == 409)
    ok("kind is PreconditionViolation", r.json().get("kind") == "PreconditionViolation")

    r = await c.get("/api/appeals/pending")
    ok("appeal is in review queue",
       any(a["id"] == appeal_id for a in r.json().get("data", [])))

    review = {"reviewComment": "Verified with the applicant.", "finalDecision": "rejected_ai_stands"}
    r = await c.post(f"/api/appeals/{appeal_id}/review", json=review)
    ok("review returns 200", r.status_code == 200, r.text[:200])
    ok("customer notified", r.json().get("notified") is True)

    r = await c.post(f"/api/appeals/{appeal_id}/review", json=review)
    ok("second review is 409", r.status_code == 409)

    r = await c.get("/api/notifications/")
    messages = [n["message"] for n in r.json().get("data", [])]
    ok("review notification delivered",
       any("Decision: Rejected - AI Result Stands." in m for m in messages))


# ---------------------------------------------------------------------------
# 4. Notifications
# ---------------------------------------------------------------------------

async def test_notifications(c: httpx.AsyncClient):
    section("Notifications")

    before = (await c.get("/api/notifications/")).json()
    r = await c.post("/api/notifications/monthly-batch")
    ok("monthly batch returns 200", r.status_code == 200)
    created = r.json().get("notificationsCreated", -1)
    ok("batch reports a count", created >= 0)

    after = (await c.get("/api/notifications/")).json()
    ok("unread count did not shrink", after["unreadCount"] >= before["unreadCount"])

    if after["data"]:
        nid = after["data"][0]["id"]
        r1 = await c.post(f"/api/notifications/{nid}/read")
        r2 = await c.post(f"/api/notifications/{nid}/read")
        ok("mark read returns 200", r1.status_code == 200)
        ok("mark read is idempotent", r2.status_code == 200 and r2.json()["read"] is True)


# ---------------------------------------------------------------------------
# 5. Error handling
# ---------------------------------------------------------------------------

async def test_error_handling(c: httpx.AsyncClient):
    section("Error handling")

    r = await c.post("/api/applications/", json={**WEAK_APPLICATION, "creditScore": 2000})
    ok("invalid application is 422", r.status_code == 422)
    ok("422 is problem details", has_keys(r.json(), "type", "title", "status", "kind"))

    r = await c.get("/api/applications/999999999")
    ok("unknown application is 404", r.status_code == 404)

    r = await c.post("/api/appeals/", json={"loanId": 999999999})
    ok("appeal on unknown loan is 404", r.status_code == 404)

    r = await c.post("/api/notifications/999999999/read")
    ok("unknown notification is 404", r.status_code == 404)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

async def main():
    parser = argparse.ArgumentParser(description="Live test suite for the FairLend API")
    parser.add_argument("--no-ai", action="store_true",
                        help="Skip sections that call the AI model")
    args = parser.parse_args()

    print("=" * 60)
    print("  LIVE TEST SUITE -- FairLend API")
    print("=" * 60)

    async with httpx.AsyncClient(base_url=BASE, headers=HEADERS, timeout=90) as c:

        try:
            r = await c.get("/health/")
            if r.status_code != 200:
                print(f"\n  Server returned {r.status_code} on /health/ -- is it running?")
                sys.exit(2)
        except httpx.ConnectError:
            print("\n  Cannot connect to server at localhost:8000 -- is it running?")
            sys.exit(2)

        await test_health(c)
        if not args.no_ai:
            app_id = await test_decision(c)
            if app_id is not None:
                await test_appeal_lifecycle(c, app_id)
        await test_notifications(c)
        await test_error_handling(c)

    print(f"\n{'=' * 60}")
    print(f"  RESULTS: {PASS} passed, {FAIL} failed")
    print(f"{'=' * 60}")

    if ERRORS:
        print("\nFailures:")
        for e in ERRORS:
            print(f"  - {e}")

    sys.exit(0 if FAIL == 0 else 1)


if __name__ == "__main__":
    asyncio.run(main())
