from contextlib import contextmanager

import streamlit as st

from core import data as dc
from core.charts import top_categories_pie
from core.filters import period_options
from core.metrics_summary import SENTINEL_LABEL, ranked_frame
from core.session import DashboardSession

PERIOD_PLACEHOLDER = "เลือกช่วงเวลา"


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card {border: 1px solid #e5e7eb;border-radius: 16px;padding: 16px;background: #ffffff;
               box-shadow: 0 4px 12px rgba(0,0,0,0.08); margin-bottom: 12px;}
        .card-header {background: #0d6efd;color: #ffffff;border-radius: 12px 12px 0 0;
                      padding: 10px 14px;margin: -16px -16px 12px;}
        .card-title {font-weight: 600;font-size: 1.2rem;letter-spacing: 1px;text-align: center;}
        .total-line {text-align: center;color: #6b7280;font-size: 0.9rem;margin-top: 12px;}
        .total-line b {color: #0d6efd;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header"><div class="card-title">{title}</div></div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def get_session() -> DashboardSession:
    if "dashboard_session" not in st.session_state:
        st.session_state["dashboard_session"] = DashboardSession()
    return st.session_state["dashboard_session"]


def load_rows(session: DashboardSession) -> dict:
    with st.spinner("Loading..."):
        data_ctx = dc.load_dashboard_data()
    rows = data_ctx.get("rows", []) or []
    # the cached list is reused across reruns, so identity means "same fetch"
    if session.rows is not rows:
        session.set_rows(rows)
    return data_ctx


def render_table(session: DashboardSession, ranked):
    window = ranked_frame(session.visible())
    if not ranked:
        st.info("ไม่พบรายการที่ตรงกับคำค้นหา")
        return
    display = window.rename(columns={"rank": "ลำดับ", "diagnosis": "การวินิจฉัย", "count": "จำนวน"})
    st.dataframe(display, use_container_width=True, hide_index=True)
    if session.has_more():
        if st.button(f"แสดงเพิ่ม ({len(ranked) - session.cursor:,} รายการ)"):
            session.advance_window()
            st.rerun()


def render_page():
    st.set_page_config(page_title="สรุปจำนวนตามการวินิจฉัย", layout="centered")
    inject_base_styles()

    session = get_session()
    data_ctx = load_rows(session)

    top = st.columns([6, 2, 2])
    if top[1].button("Refresh"):
        dc.refresh_dashboard_data()
        for key in ("dashboard_session", "search_text", "selected_period"):
            st.session_state.pop(key, None)
        st.rerun()

    with card("สรุปจำนวนตามการวินิจฉัย"):
        if not data_ctx.get("loaded"):
            st.error("Could not load data from the source. Try Refresh later.")
            return
        if not session.rows:
            st.info("No rows returned by the source.")
            return

        search = st.text_input("ค้นหา", key="search_text", placeholder="ค้นหา")
        session.set_search(search)
        options = [""] + period_options()
        period = st.selectbox(
            "ช่วงเวลา",
            options=options,
            key="selected_period",
            format_func=lambda v: v or PERIOD_PLACEHOLDER,
        )
        session.set_period(period)

        ranked = session.ranked()
        render_table(session, ranked)
        st.markdown(
            f"<div class='total-line'>รวมทั้งหมด <b>{len(ranked):,}</b> รายการ</div>",
            unsafe_allow_html=True,
        )

        summary = session.summary()
        unspecified = summary.get(SENTINEL_LABEL, 0)
        if unspecified:
            st.caption(f"{unspecified:,} rows have no diagnosis and are not listed.")

        export_df = ranked_frame(ranked)
        top[2].download_button(
            "Export CSV",
            data=export_df.to_csv(index=False).encode("utf-8"),
            file_name="diagnosis_summary.csv",
            mime="text/csv",
        )

        if st.checkbox("Show top diagnoses chart", value=False):
            top_n = st.slider("Top N", min_value=3, max_value=20, value=10)
            chart = top_categories_pie(ranked, top_n=top_n)
            if chart is None:
                st.info("Nothing to chart.")
            else:
                st.altair_chart(chart, use_container_width=True)


render_page()
