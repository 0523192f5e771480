import os
import time
from typing import Any, Dict, List, Optional, Tuple

import requests
import streamlit as st

from user_admin.public_ip import PublicIPLookupError, fetch_public_ip

st.set_page_config(page_title="User Admin", layout="centered")

# Minimal CSS overrides that are stable across Streamlit versions.
st.markdown(
    """
    <style>
      .stApp { background: #070F1A; }
      .ua-title {
        font-size: 2.0rem;
        font-weight: 800;
        color: #EAF3FF;
        margin: 0;
        line-height: 1.1;
      }
      .ua-subtitle {
        color: rgba(234, 243, 255, 0.75);
        margin-top: 0.35rem;
        margin-bottom: 0.25rem;
      }
      section[data-testid="stSidebar"] {
        background: #071528;
        border-right: 1px solid rgba(31, 156, 255, 0.18);
      }
    </style>
    """,
    unsafe_allow_html=True,
)

st.markdown('<div class="ua-title">User Admin</div>', unsafe_allow_html=True)
st.markdown('<div class="ua-subtitle">Accounts, block status, renewals and referrals</div>', unsafe_allow_html=True)

API_BASE_URL = os.environ.get("USER_ADMIN_API_URL", "http://127.0.0.1:8080").rstrip("/")


def _healthcheck(base_url: str) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """Returns (ok, message, json_payload_if_any). Never raises."""
    try:
        resp = requests.get(f"{base_url}/healthz", timeout=2)
        if resp.status_code != 200:
            return False, f"HTTP {resp.status_code}", None
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        return True, "Healthy", payload
    except requests.exceptions.RequestException as e:
        return False, f"Not reachable: {e.__class__.__name__}", None


def _list_users(base_url: str) -> Tuple[List[Dict[str, Any]], Optional[str]]:
    """Returns (users, error_string). Never raises."""
    try:
        resp = requests.get(f"{base_url}/api/usuarios", timeout=10)
    except requests.exceptions.RequestException as e:
        return [], f"Request failed: {e!r}"

    try:
        body = resp.json()
    except ValueError as e:
        return [], f"Invalid JSON from server: {e}"

    if resp.status_code != 200:
        return [], f"HTTP {resp.status_code}: {body.get('message', '')}"
    return list(body.get("data") or []), None


def _post_action(base_url: str, payload: Dict[str, Any]) -> Tuple[bool, str]:
    """Returns (ok, envelope_message). Never raises."""
    try:
        resp = requests.post(f"{base_url}/api/user-action", json=payload, timeout=10)
    except requests.exceptions.RequestException as e:
        return False, f"Request failed: {e!r}"

    try:
        message = resp.json().get("message", "")
    except ValueError:
        message = resp.text
    return resp.status_code == 200, f"HTTP {resp.status_code}: {message}"


def _show_result(ok: bool, message: str) -> None:
    if ok:
        st.success(message)
    else:
        st.error(message)


# --- Sidebar: backend status ---
with st.sidebar:
    st.subheader("Backend")
    st.write("API:", API_BASE_URL)

    # Small cache so we don't spam /healthz on every widget interaction.
    now = time.time()
    last_ts = st.session_state.get("health_ts", 0.0)
    if st.button("Refresh status") or (now - last_ts) > 3:
        ok, msg, payload = _healthcheck(API_BASE_URL)
        st.session_state["health_ok"] = ok
        st.session_state["health_msg"] = msg
        st.session_state["health_payload"] = payload
        st.session_state["health_ts"] = now

    ok = st.session_state.get("health_ok", False)
    msg = st.session_state.get("health_msg", "Unknown")
    payload = st.session_state.get("health_payload")

    if ok:
        st.success(f"Status: {msg}")
        if isinstance(payload, dict):
            st.caption(f"Service: {payload.get('service', 'unknown')} | Version: {payload.get('version', 'unknown')}")
    else:
        st.error(f"Status: {msg}")
        st.caption("Start the API with: user-admin (DATABASE_URL must be set)")

# --- Users ---
st.subheader("Users")
users, err = _list_users(API_BASE_URL)
if err:
    st.error("Could not list users")
    st.code(err)
elif not users:
    st.info("No users yet.")
else:
    st.dataframe(users, use_container_width=True)

usernames = [u.get("username", "") for u in users]

# --- Actions ---
st.subheader("Actions")
tab_create, tab_password, tab_block, tab_renewal, tab_referral, tab_ip = st.tabs(
    ["Create", "Password", "Block", "Renewal", "Referrals", "IP"]
)

with tab_create:
    with st.form("create-user"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        renewal = st.date_input("Renewal date")
        if st.form_submit_button("Create user"):
            _show_result(
                *_post_action(
                    API_BASE_URL,
                    {
                        "action": "create-user",
                        "username": username,
                        "password": password,
                        "renewalDate": renewal.isoformat(),
                    },
                )
            )

with tab_password:
    with st.form("set-password"):
        username = st.selectbox("User", usernames, key="pw_user")
        new_password = st.text_input("New password", type="password")
        if st.form_submit_button("Update password"):
            _show_result(
                *_post_action(
                    API_BASE_URL,
                    {"action": "set-password", "username": username or "", "newPassword": new_password},
                )
            )

with tab_block:
    with st.form("set-blocked"):
        username = st.selectbox("User", usernames, key="block_user")
        blocked = st.checkbox("Blocked")
        if st.form_submit_button("Apply"):
            _show_result(
                *_post_action(
                    API_BASE_URL,
                    {"action": "set-blocked", "username": username or "", "isBlocked": bool(blocked)},
                )
            )

with tab_renewal:
    with st.form("set-renewal"):
        username = st.selectbox("User", usernames, key="renewal_user")
        renewal = st.date_input("New renewal date")
        if st.form_submit_button("Update renewal"):
            _show_result(
                *_post_action(
                    API_BASE_URL,
                    {"action": "set-renewal", "username": username or "", "renewalDate": renewal.isoformat()},
                )
            )

with tab_referral:
    with st.form("set-referral"):
        username = st.selectbox("User", usernames, key="referral_user")
        count = st.number_input("Referral count", min_value=0, step=1, value=0)
        if st.form_submit_button("Update referrals"):
            _show_result(
                *_post_action(
                    API_BASE_URL,
                    {"action": "set-referral", "username": username or "", "indicacao": int(count)},
                )
            )

with tab_ip:
    if st.button("Use my public IP"):
        try:
            st.session_state["ip_value"] = fetch_public_ip()
        except PublicIPLookupError as e:
            st.warning(str(e))

    with st.form("set-ip"):
        username = st.selectbox("User", usernames, key="ip_user")
        new_ip = st.text_input("New IP (empty clears it)", key="ip_value")
        if st.form_submit_button("Update IP"):
            _show_result(
                *_post_action(
                    API_BASE_URL,
                    {"action": "set-ip", "username": username or "", "newIp": new_ip},
                )
            )
