# Run from project root: streamlit run app/ui.py
# UI talks to backend API (GET /sources, POST /query). Chat history lives in the browser session and is sent in full on every turn.

import os

import requests
import streamlit as st

# Backend config
API_BASE = os.environ.get("API_BASE", "http://localhost:8000")


def render_response(response: dict) -> None:
    """Render one assistant entry from chat_history (normal, Comparison or fallback)."""
    kind = response.get("type")
    if kind == "Comparison":
        if response.get("title"):
            st.markdown(f"**{response['title']}**")
        subjects = response.get("ComparisonArray") or []
        for column, subject in zip(st.columns(len(subjects) or 1), subjects):
            with column:
                st.markdown(f"#### {subject.get('name', '')}")
                for point in subject.get("pointArray") or []:
                    st.markdown(f"**{point.get('pointTitle', '')}**: {point.get('point', '')}")
        if response.get("keyPoints"):
            st.info(response["keyPoints"])
    elif kind == "normal":
        st.markdown(response.get("output", ""))
    else:
        st.warning(response.get("output", "No answer."))


st.title("Manifesto Q&A")

# Show which manifestos the agent can search (on every render)
try:
    r = requests.get(f"{API_BASE}/sources", timeout=10)
    if r.ok:
        sources = r.json().get("sources") or []
        st.caption("Ask about or compare these manifestos:")
        for s in sources:
            st.caption(f"  • {s.get('description', s.get('name', ''))}")
    else:
        st.caption("Could not load manifesto list.")
except requests.RequestException:
    st.caption("Backend not reachable — start the API first.")

st.divider()

if "chat_history" not in st.session_state:
    st.session_state.chat_history = []
# New chat: drop the local history; the server keeps none
if st.button("New chat", key="new_chat"):
    st.session_state.chat_history = []
    st.session_state.last_error = None
    st.rerun()

for entry in st.session_state.chat_history:
    if isinstance(entry, dict) and entry.get("role") == "human":
        with st.chat_message("user"):
            st.markdown(entry.get("input", ""))
    elif isinstance(entry, dict):
        with st.chat_message("assistant"):
            render_response(entry)

# If we just submitted a query, show it and then show "Thinking..." while waiting for response
if st.session_state.get("pending_query"):
    prompt = st.session_state.pending_query
    with st.chat_message("user"):
        st.markdown(prompt)
    with st.chat_message("assistant"):
        thinking_placeholder = st.empty()
        thinking_placeholder.caption("Thinking...")
        try:
            r = requests.post(
                f"{API_BASE}/query",
                json={"input": prompt, "chat_history": st.session_state.chat_history},
                timeout=180,
            )
            thinking_placeholder.empty()
            if r.ok:
                data = r.json()
                # Replace local history only on success so a failed turn can be retried as-is
                st.session_state.chat_history = data.get("chat_history") or st.session_state.chat_history
                render_response(data.get("response") or {})
            else:
                st.session_state.last_error = f"Error: {r.status_code} — {r.text[:200]}"
        except requests.RequestException as e:
            thinking_placeholder.empty()
            st.session_state.last_error = f"Connection failed: {e}"
    del st.session_state["pending_query"]
    st.rerun()

if st.session_state.get("last_error"):
    st.error(st.session_state.last_error)

if prompt := st.chat_input("Ask about a manifesto, or ask to compare two of them"):
    st.session_state.pending_query = prompt
    st.session_state.last_error = None
    st.rerun()
