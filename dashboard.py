"""
Agent Review Console for the ClaimDesk API

A Streamlit dashboard providing:
- Claim queue with status filtering
- Claim timeline
- AI case file with signals and the final recommendation
- Estimate and authorization form with per-field override reasons
- Senior approval with the review checkbox
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import requests
import streamlit as st

from claimdesk.config import get_settings

# Configuration
API_BASE_URL = get_settings().api_url

SEVERITIES = ["Low", "Medium", "High"]
NEXT_STEPS = ["Approve", "Review", "Escalate"]
STATUS_ICONS = {
    "New": "🆕",
    "In Review": "🔎",
    "Pending Approval": "⏳",
    "Needs More Photos": "📷",
    "Authorized": "✅",
}
OVERRIDE_LABELS = {
    "severity": "Severity",
    "recommended_next_step": "Recommended next step",
    "estimated_repair_cost": "Estimated repair cost",
    "final_estimate_vs_total": "Final estimate vs line-item total",
}

# Page configuration
st.set_page_config(
    page_title="ClaimDesk Agent Console",
    page_icon="🚗",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .stAlert {margin-top: 1rem;}
    .timeline-item {
        padding: 10px 15px;
        border-left: 3px solid #4CAF50;
        margin-left: 20px;
        margin-bottom: 10px;
        background: #f8f9fa;
        border-radius: 0 8px 8px 0;
    }
    .timeline-item.ai {border-left-color: #7b1fa2;}
    .timeline-item.approval {border-left-color: #2196F3;}
    .timeline-item.photos {border-left-color: #ef6c00;}
</style>
""", unsafe_allow_html=True)


# ============================================
# API HELPERS
# ============================================

def _error_message(response: requests.Response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        return response.text
    if isinstance(detail, dict):
        return detail.get("message", str(detail))
    return str(detail)


def api_get(path: str, **params) -> Optional[Any]:
    """GET from the API; None when the server is unreachable or answers an error."""
    try:
        response = requests.get(f"{API_BASE_URL}{path}", params=params or None, timeout=5)
        if response.status_code == 200:
            return response.json()
    except requests.exceptions.RequestException:
        return None
    return None


def api_post(path: str, payload: Optional[dict] = None, timeout: int = 10) -> Tuple[bool, Any]:
    """POST to the API. Returns (ok, body) or (False, advisory message)."""
    try:
        response = requests.post(f"{API_BASE_URL}{path}", json=payload, timeout=timeout)
    except requests.exceptions.RequestException as e:
        return False, str(e)
    if response.status_code in (200, 201):
        return True, response.json()
    return False, _error_message(response)


def get_claims_summary() -> Optional[dict]:
    return api_get("/claims/dashboard/summary")


def get_claim_detail(claim_id: str) -> Optional[dict]:
    body = api_get(f"/claims/{claim_id}")
    return body["claim"] if body else None


def _format_time(value: Optional[str]) -> str:
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%b %d %H:%M")
    except ValueError:
        return value


# ============================================
# RENDERING
# ============================================

def render_timeline(claim: dict):
    """Render the claim timeline."""
    st.subheader("📊 Timeline")

    events = claim.get("events", [])
    if not events:
        st.info("No events recorded yet")
        return

    for event in events:
        event_type = event.get("type", "")
        css = (
            "ai" if event_type.startswith("ai_")
            else "approval" if event_type in ("submitted_for_approval", "claim_authorized")
            else "photos" if event_type == "photos_requested"
            else ""
        )
        st.markdown(f"""
        <div class="timeline-item {css}">
            <strong>[{_format_time(event.get('at'))}] {event_type.replace('_', ' ').title()}</strong><br>
            {event.get('message', '')}
        </div>
        """, unsafe_allow_html=True)


def render_photos(claim: dict):
    photos = claim.get("photos", [])
    if not photos:
        st.info("No photos attached to this claim")
        return
    cols = st.columns(min(3, len(photos)))
    for index, photo in enumerate(photos):
        with cols[index % len(cols)]:
            if photo.get("url"):
                st.image(photo["url"], caption=photo.get("name"), use_container_width=True)
            else:
                st.markdown(f"📎 {photo.get('name')}")


def render_case_file(claim: dict):
    """Render the AI case file."""
    st.subheader("🤖 AI Case File")

    case_file = claim.get("ai_case_file")
    if claim.get("read_only_imported"):
        st.info("Imported claims are read-only.")
    elif st.button("▶️ Run AI Assessment", type="primary"):
        with st.spinner("Running damage, estimate and comparables pipeline..."):
            ok, body = api_post(f"/claims/{claim['id']}/assess", timeout=30)
        if ok:
            st.session_state.flash = ("success", body.get("message", "Assessment complete"))
            st.rerun()
        else:
            st.error(body)

    render_photos(claim)

    if not case_file:
        st.info("No AI assessment yet")
        return

    recommendation = case_file["final_recommendation"]
    decision = recommendation["decision"]
    banner = st.success if decision == "Authorize" else st.warning if decision == "Escalate" else st.error
    banner(f"**{decision}** ({recommendation['confidence']:.0%}) - {recommendation['explanation']}")

    col1, col2, col3 = st.columns(3)
    with col1:
        severity = case_file["severity"]
        st.metric("Severity", severity["value"], f"{severity['confidence']:.0%} confidence", delta_color="off")
        st.caption(severity["explanation"])
    with col2:
        next_step = case_file["next_step"]
        st.metric("Next Step", next_step["value"], f"{next_step['confidence']:.0%} confidence", delta_color="off")
        st.caption(next_step["explanation"])
    with col3:
        duration = case_file["duration"]
        st.metric("Repair Time", f"{duration['min_days']}-{duration['max_days']} days")
        st.caption(duration["explanation"])
        if duration.get("recommended_rental_days"):
            st.caption(f"🚙 Rental recommended for {duration['recommended_rental_days']} days")

    estimate = case_file["estimate"]
    band = estimate["cost_band"]
    st.markdown(
        f"**Estimate:** ${estimate['total']:,} "
        f"(typical {case_file['severity']['value'].lower()} band ${band['min']:,}-${band['max']:,})"
    )
    st.table([
        {"Item": item["description"], "Category": item["category"], "Amount": f"${item['amount']:,}"}
        for item in estimate["line_items"]
    ])

    split = case_file.get("coverage_split")
    if split:
        st.caption(
            f"Deductible ${split['deductible']:,}: customer pays ${split['customer_pays']:,}, "
            f"insurer pays ${split['insurer_pays']:,}"
        )

    signals = case_file.get("signals", [])
    if signals:
        st.markdown("**⚠️ Review Signals**")
        for signal in signals:
            show = st.warning if signal["severity"] == "Warning" else st.info
            show(f"**{signal['title']}** - {signal['recommended_action']}")

    similar = case_file["similar_claims"]
    with st.expander(f"Similar historical claims ({len(similar['matches'])})"):
        if similar.get("typical_cost_range"):
            cost_range = similar["typical_cost_range"]
            st.markdown(f"Typical cost: ${cost_range['min']:,}-${cost_range['max']:,}")
        for match in similar["matches"]:
            st.markdown(
                f"- `{match['id']}` {match['vehicle_make']} {match['vehicle_model']} "
                f"({match['severity']}, score {match['score']}): ${match['final_repair_cost']:,}, "
                f"{match['repair_duration_days']} days - {match['short_description']}"
            )


def _decision_form(claim: dict) -> Tuple[dict, str]:
    """Collect the agent decision; returns (payload, notes)."""
    assessment = claim.get("ai_assessment") or {}
    case_file = claim.get("ai_case_file") or {}
    previous = claim.get("agent_decision") or {}
    ai_total = case_file.get("estimate", {}).get("total")

    col1, col2, col3 = st.columns(3)
    with col1:
        default_severity = previous.get("severity") or assessment.get("severity") or "Medium"
        severity = st.selectbox("Final severity", SEVERITIES, index=SEVERITIES.index(default_severity))
    with col2:
        default_step = previous.get("recommended_next_step") or assessment.get("recommended_next_step") or "Review"
        next_step = st.selectbox("Final next step", NEXT_STEPS, index=NEXT_STEPS.index(default_step))
    with col3:
        default_cost = previous.get("estimated_repair_cost")
        if default_cost is None:
            default_cost = ai_total or 0
        estimate = st.number_input("Final estimate ($)", min_value=0, step=50, value=int(default_cost))

    reasons = {}
    previous_reasons = previous.get("override_reasons") or {}
    overridden = []
    if assessment and severity != assessment.get("severity"):
        overridden.append("severity")
    if assessment and next_step != assessment.get("recommended_next_step"):
        overridden.append("recommended_next_step")
    if ai_total is not None and estimate != ai_total:
        overridden.append("estimated_repair_cost")
        if ai_total and abs(estimate - ai_total) / ai_total > 0.10:
            overridden.append("final_estimate_vs_total")

    for field in overridden:
        reasons[field] = st.text_input(
            f"Reason for overriding {OVERRIDE_LABELS[field].lower()}",
            value=previous_reasons.get(field, ""),
            key=f"reason_{claim['id']}_{field}",
        )

    notes = st.text_area("Agent notes", value=claim.get("agent_notes", ""), key=f"notes_{claim['id']}")
    payload = {
        "severity": severity if assessment else None,
        "recommended_next_step": next_step if assessment else None,
        "estimated_repair_cost": int(estimate),
        "line_items": case_file.get("estimate", {}).get("line_items", []),
        "override_reasons": {field: reason for field, reason in reasons.items() if reason},
    }
    return payload, notes


def render_authorization(claim: dict):
    """Render the estimate and authorization controls."""
    st.subheader("📝 Estimate & Authorization")

    status = claim.get("status")
    if claim.get("read_only_imported"):
        st.info("Imported claims are read-only.")
        return
    if status == "Authorized":
        approval = claim.get("senior_approval") or {}
        st.success(f"Authorized {_format_time(claim.get('authorized_at'))}. {approval.get('note', '')}")
        return

    if status == "Pending Approval":
        st.markdown("**Senior approval**")
        reviewed = st.checkbox("I have completed senior review of this estimate", key=f"senior_{claim['id']}")
        note = st.text_input("Approval note", key=f"approval_note_{claim['id']}")
        if st.button("✅ Authorize Claim", type="primary"):
            ok, body = api_post(f"/claims/{claim['id']}/approve", {"senior_reviewed": reviewed, "note": note})
            if ok:
                st.session_state.flash = ("success", body.get("message", "Claim authorized"))
                st.rerun()
            else:
                st.error(f"⛔ {body}")
        return

    payload, notes = _decision_form(claim)
    body = {"decision": payload, "notes": notes}

    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button("💾 Save Draft", use_container_width=True):
            ok, result = api_post(f"/claims/{claim['id']}/draft", body)
            if ok:
                st.session_state.flash = ("success", result.get("message", "Draft saved"))
                st.rerun()
            else:
                st.error(f"⛔ {result}")
    with col2:
        if st.button("📤 Submit for Approval", type="primary", use_container_width=True):
            ok, result = api_post(f"/claims/{claim['id']}/submit", body)
            if ok:
                st.session_state.flash = ("success", result.get("message", "Submitted"))
                st.rerun()
            else:
                st.error(f"⛔ {result}")
    with col3:
        if status in ("New", "In Review") and st.button("📷 Request Photos", use_container_width=True):
            ok, result = api_post(f"/claims/{claim['id']}/request-photos", {})
            if ok:
                st.session_state.flash = ("info", result.get("message", "Photos requested"))
                st.rerun()
            else:
                st.error(f"⛔ {result}")


def render_vehicle_lookup():
    """Sidebar tool for plate / VIN lookups."""
    with st.expander("🔎 Vehicle Lookup"):
        identifier = st.text_input("Plate or VIN", key="lookup_identifier")
        state = st.text_input("State (plates only)", key="lookup_state", max_chars=2)
        if st.button("Look up", use_container_width=True) and identifier:
            try:
                response = requests.get(
                    f"{API_BASE_URL}/vehicles/lookup",
                    params={"identifier": identifier, **({"state": state} if state else {})},
                    timeout=5,
                )
            except requests.exceptions.RequestException as e:
                st.error(str(e))
                return
            if response.status_code == 200:
                vehicle = response.json()
                st.success(f"{vehicle['year']} {vehicle['make']} {vehicle['model']} ({vehicle.get('body_type')})")
            else:
                detail = response.json().get("detail", {})
                st.error(detail.get("message", "Lookup failed"))
                if detail.get("retryable"):
                    st.caption(f"🔁 {detail.get('hint', 'You can retry.')}")


def render_queue(summary: dict) -> None:
    st.markdown("**Filter by Status:**")
    status_counts = summary.get("status_counts", {})
    selected_status = st.selectbox(
        "Status",
        options=["ALL"] + list(status_counts.keys()),
        format_func=lambda x: f"{x} ({status_counts.get(x, 0)})" if x != "ALL" else f"ALL ({summary.get('total_claims', 0)})"
    )

    st.markdown("---")
    claims: List[Dict[str, Any]] = summary.get("claims", [])
    if selected_status != "ALL":
        claims = [c for c in claims if c["status"] == selected_status]

    for claim in claims:
        icon = STATUS_ICONS.get(claim["status"], "")
        label = f"{icon} {claim['id']} - {claim['vehicle']}"
        if claim.get("queue_label"):
            label = f"⭐ {label}"
        if st.button(
            label,
            key=f"claim_{claim['id']}",
            use_container_width=True,
            help=f"Status: {claim['status']}\nSubmitted: {_format_time(claim['submitted_at'])}"
        ):
            st.session_state.selected_claim = claim["id"]
            api_post(f"/claims/{claim['id']}/open", {"assignee": "Agent"})


def main():
    """Main console application."""
    st.title("🚗 ClaimDesk Agent Console")
    st.markdown("Auto claim review with AI case files")

    with st.sidebar:
        st.header("📋 Claim Queue")

        col1, col2 = st.columns(2)
        with col1:
            if st.button("🔄 Refresh", use_container_width=True):
                st.rerun()
        with col2:
            if st.button("♻️ Reset Demo", use_container_width=True):
                api_post("/claims/reset-demo")
                st.session_state.pop("selected_claim", None)
                st.rerun()

        summary = get_claims_summary()
        if summary is None:
            st.error("⚠️ Cannot connect to API. Is the server running?")
            st.code("uvicorn claimdesk.main:app --reload")
            return

        render_queue(summary)

        st.markdown("---")
        st.markdown("**📊 Statistics**")
        col1, col2 = st.columns(2)
        with col1:
            st.metric("Total", summary.get("total_claims", 0))
        with col2:
            st.metric("Needs Attention", summary.get("needs_attention", 0))

        render_vehicle_lookup()

    flash = st.session_state.pop("flash", None)
    if flash:
        kind, message = flash
        (st.success if kind == "success" else st.info)(message)

    if "selected_claim" not in st.session_state:
        st.info("👈 Select a claim from the sidebar to review it")
        if summary:
            st.markdown("### 📈 Quick Overview")
            cols = st.columns(5)
            for i, (claim_status, count) in enumerate(summary.get("status_counts", {}).items()):
                with cols[i % 5]:
                    st.metric(claim_status, count)
        return

    claim = get_claim_detail(st.session_state.selected_claim)
    if not claim:
        st.error("Could not load claim details")
        return

    vehicle = claim["vehicle"]
    col1, col2, col3 = st.columns([2, 1, 1])
    with col1:
        st.markdown(f"### {vehicle['year']} {vehicle['make']} {vehicle['model']}")
    with col2:
        policy = claim.get("policy") or {}
        st.markdown(f"**Insured:** {policy.get('insured_name', 'Unknown')}")
        if policy:
            st.caption(f"{policy['policy_id']} - {policy['coverage']} - ${policy['deductible']:,} deductible")
    with col3:
        st.markdown(f"**{STATUS_ICONS.get(claim['status'], '')} {claim['status']}**")

    st.markdown(f"**Claim ID:** `{claim['id']}`")
    incident = claim.get("incident") or {}
    if incident.get("incident_description"):
        st.markdown(f"_{incident['incident_description']}_")
    if incident.get("tow_requested"):
        tow_col, refresh_col = st.columns([4, 1])
        with tow_col:
            st.warning(f"🚚 Tow {incident.get('tow_status') or 'requested'} {incident.get('tow_id') or ''}")
        with refresh_col:
            if not claim.get("read_only_imported") and st.button("🔄 Tow status", use_container_width=True):
                ok, result = api_post(f"/claims/{claim['id']}/tow-status")
                if ok:
                    st.session_state.flash = ("info", f"Tow {result['tow_status']}")
                    st.rerun()
                else:
                    st.error(f"⛔ {result}")

    st.markdown("---")

    tab1, tab2, tab3 = st.tabs([
        "🤖 Case File",
        "📝 Estimate & Authorization",
        "📊 Timeline",
    ])

    with tab1:
        render_case_file(claim)

    with tab2:
        render_authorization(claim)

    with tab3:
        render_timeline(claim)


if __name__ == "__main__":
    main()
