from typing import Callable, List, Optional

import streamlit as st

from .io_utils import base64_to_image
from .models import DiagnosisRecord


def _bullets(title: str, items: List[str]):
    if not items:
        return
    st.markdown(f"**{title}**")
    st.markdown("\n".join(f"- {item}" for item in items))


def render_image(image: Optional[str], caption: str = ""):
    if not image:
        st.info("📷 No image stored for this diagnosis")
        return
    img = base64_to_image(image)
    if img:
        st.image(img, caption=caption or None, width=480)
    else:
        st.error("Failed to decode image")


def render_diagnosis(
    record: DiagnosisRecord,
    is_saved: bool,
    on_save: Callable[[], None],
    on_update_notes: Callable[[str, str], None],
):
    fields = record.fields
    icon = "🌿" if record.is_healthy else "🦠"
    st.subheader(f"{icon} {record.disease_name}")
    if record.plant_name:
        st.caption(f"Plant: {record.plant_name}")
    if record.confidence is not None:
        st.progress(record.confidence / 100, text=f"Confidence: {record.confidence:.0f}%")
    if fields.get("description"):
        st.write(fields["description"])

    _bullets("Symptoms", fields.get("symptoms") or [])
    treatment = fields.get("treatment") or {}
    _bullets("Organic treatment", treatment.get("organic") or [])
    _bullets("Chemical treatment", treatment.get("chemical") or [])
    _bullets("Prevention", fields.get("prevention") or [])

    st.markdown("---")
    if is_saved:
        st.button("✅ Saved to history", key=f"saved_{record.id}", disabled=True)
    elif st.button("💾 Save to history", key=f"save_{record.id}", type="primary"):
        on_save()

    notes = st.text_area(
        "📝 Notes",
        value=record.user_notes or "",
        height=100,
        key=f"notes_{record.id}",
        placeholder="Field observations, treatment applied, follow-up dates...",
    )
    if st.button("Save notes", key=f"save_notes_{record.id}"):
        if notes != (record.user_notes or ""):
            on_update_notes(record.id, notes)
        st.success("✅ Notes updated!")

    st.caption("This tool uses AI and can make mistakes. Consult an agronomist for critical cases.")


def render_history_list(
    items: List[DiagnosisRecord],
    on_select: Callable[[DiagnosisRecord], None],
    on_delete: Callable[[str], None],
):
    if not items:
        return
    st.header("🕘 Recent analyses")
    for row_index, item in enumerate(items):
        col1, col2, col3 = st.columns([1, 4, 1])
        with col1:
            if item.image_url:
                img = base64_to_image(item.image_url)
                if img:
                    st.image(img, width=80)
        with col2:
            st.markdown(f"**{item.disease_name}**")
            details = [d for d in (item.plant_name, item.fields.get("analyzed_at", "")) if d]
            if details:
                st.caption(" · ".join(details))
            if item.user_notes:
                st.caption(f"📝 {item.user_notes}")
        with col3:
            # row index in the key keeps duplicate ids from clashing
            if st.button("Open", key=f"open_{row_index}_{item.id}"):
                on_select(item)
            if st.button("🗑️", key=f"delete_{row_index}_{item.id}", help="Remove from history"):
                on_delete(item.id)
