import logging
from datetime import datetime
from typing import Optional

import streamlit as st

from .config import load_settings
from .io_utils import prepare_upload
from .models import DiagnosisRecord
from .persistence import HistoryStore, export_csv
from .session import AnalysisSession
from .storage import JsonFileStorage
from .theme import DARK_CSS, load_theme, toggle_theme
from .ui_components import render_diagnosis, render_history_list, render_image
from .vision import PlantDiagnoser
from .vision_model import fetch_models, filter_vision_models, get_provider_config, init_client

logger = logging.getLogger(__name__)

st.set_page_config(page_title="Dr Plant", page_icon="🌱", layout="wide")


@st.cache_resource
def get_settings():
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)
    return settings


@st.cache_data(show_spinner=False)
def get_models_cached(base: str, key: str) -> list:
    try:
        return fetch_models(base, key)
    except Exception as e:
        logger.warning("Could not list models from %s: %s", base, e)
        return []


def init_session_state(settings):
    ss = st.session_state
    if "store" not in ss:
        # loaded once per browser session
        storage = JsonFileStorage(settings.storage_path)
        ss.store = HistoryStore(storage)
        ss.history = ss.store.load()
        ss.theme = load_theme(storage, settings.default_theme)
    ss.setdefault("session", AnalysisSession())
    ss.setdefault("uploader_nonce", 0)  # bumped to clear the upload widgets
    ss.setdefault("provider", settings.provider)
    ss.setdefault("model", settings.model)


def get_diagnoser(settings):
    provider = get_provider_config(settings.providers, st.session_state.provider)
    return PlantDiagnoser(init_client(provider), st.session_state.model)


def save_current():
    ss = st.session_state
    record = ss.session.record_for_saving()
    if record is None:
        return
    try:
        ss.history = ss.store.insert(record, ss.history)
    except OSError as e:
        st.error(f"Could not save to history: {e}")
        return
    st.rerun()


def update_notes(record_id: str, notes: str):
    ss = st.session_state
    ss.session.apply_notes(record_id, notes)
    try:
        ss.history = ss.store.update_notes(record_id, notes, ss.history)
    except OSError as e:
        st.error(f"Could not save notes: {e}")


def delete_from_history(record_id: str):
    ss = st.session_state
    try:
        ss.history = ss.store.remove(record_id, ss.history)
    except OSError as e:
        st.error(f"Could not update history: {e}")
        return
    st.rerun()


def select_from_history(record: DiagnosisRecord):
    st.session_state.session.select(record)
    st.rerun()


def analyze_image(settings, image: Optional[str] = None, upload_id: Optional[str] = None) -> bool:
    """Diagnose a new image, or retry the selected one when image is None."""
    session = st.session_state.session
    try:
        diagnoser = get_diagnoser(settings)
    except (KeyError, ValueError) as e:
        st.error(str(e))
        return False
    with st.spinner("Analyzing your plant..."):
        if image is None:
            return session.retry(diagnoser.analyze)
        if upload_id is not None:
            return session.run_upload(upload_id, diagnoser.analyze, image)
        return session.run(diagnoser.analyze, image)


def render_sidebar(settings):
    ss = st.session_state
    with st.sidebar:
        st.header("⚙️ Settings")
        provider_names = list(settings.providers.keys())
        ss.provider = st.selectbox(
            "Provider", provider_names, index=provider_names.index(ss.provider) if ss.provider in provider_names else 0
        )
        models = []
        try:
            provider = get_provider_config(settings.providers, ss.provider)
            models = filter_vision_models(get_models_cached(provider.base_url, provider.api_key))
        except (KeyError, ValueError) as e:
            st.warning(str(e))
        if models:
            ss.model = st.selectbox("Model", models, index=models.index(ss.model) if ss.model in models else 0)
        else:
            ss.model = st.text_input("Model", value=ss.model)

        st.subheader("📊 History")
        st.metric("Saved analyses", len(ss.history))
        if ss.history:
            ts = datetime.now().strftime("%Y%m%d_%H%M%S")
            st.download_button(
                label="💾 Download CSV",
                data=export_csv(ss.history),
                file_name=f"drplant_history_{ts}.csv",
                mime="text/csv",
            )


def render_header():
    ss = st.session_state
    c1, c2, c3 = st.columns([4, 1, 1])
    with c1:
        st.title("🌱 Dr Plant")
    with c2:
        label = "☀️ Light" if ss.theme == "dark" else "🌙 Dark"
        if st.button(label):
            ss.theme = toggle_theme(ss.store.storage, ss.theme)
            st.rerun()
    with c3:
        if st.button("🏠 Start over"):
            ss.session.reset()
            ss.uploader_nonce += 1
            st.rerun()


def render_start(settings):
    ss = st.session_state
    st.markdown("Take or upload a photo of a plant to identify diseases, pests and deficiencies.")
    tab_upload, tab_camera = st.tabs(["📤 Upload", "📷 Camera"])
    with tab_upload:
        uploaded = st.file_uploader("Choose a plant photo", type=["png", "jpg", "jpeg", "webp"], key=f"uploader_{ss.uploader_nonce}")
    with tab_camera:
        captured = st.camera_input("Take a photo", key=f"camera_{ss.uploader_nonce}")

    source = uploaded or captured
    if source is not None:
        upload_id = f"{source.name}_{source.size}"
        if not ss.session.is_processed(upload_id):
            try:
                image = prepare_upload(source.getvalue())
            except ValueError as e:
                st.error(f"Could not read {source.name}: {e}")
                return
            if analyze_image(settings, image, upload_id=upload_id):
                st.rerun()

    render_history_list(ss.history, on_select=select_from_history, on_delete=delete_from_history)


def render_analysis(settings):
    ss = st.session_state
    session = ss.session
    col_image, col_result = st.columns(2)
    with col_image:
        render_image(session.selected_image, caption="Analyzed plant")
    with col_result:
        if session.is_loading:
            st.info("Analyzing your plant...")
        elif session.error:
            st.error(session.error)
            if st.button("🔄 Try again"):
                if analyze_image(settings):
                    st.rerun()
        elif session.current is not None:
            render_diagnosis(
                session.current,
                is_saved=ss.store.is_saved(session.current.id, ss.history),
                on_save=save_current,
                on_update_notes=update_notes,
            )


def main():
    settings = get_settings()
    init_session_state(settings)
    if st.session_state.theme == "dark":
        st.markdown(DARK_CSS, unsafe_allow_html=True)

    render_sidebar(settings)
    render_header()

    session = st.session_state.session
    if session.selected_image is None and session.current is None:
        render_start(settings)
    else:
        render_analysis(settings)


if __name__ == "__main__":
    main()
