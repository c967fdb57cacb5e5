import asyncio

import pandas as pd
import streamlit as st

from stock_admin.config import get_config
from stock_admin.data.util import get_stock_api
from stock_admin.screen.export import StockExporter, format_price, format_timestamp
from stock_admin.screen.list_store import ListStore
from stock_admin.screen.notifications import NotificationKind
from stock_admin.screen.orchestrator import CrudOrchestrator, DialogKind

st.set_page_config(page_title="在庫管理", layout="wide")

config = get_config()


def run(coro):
    """Drive one screen action to completion inside the Streamlit script run."""
    return asyncio.run(coro)


class SessionDownload:
    """Keeps the exported CSV until the download button hands it to the browser."""

    def __call__(self, text: str, filename: str) -> None:
        st.session_state["pending_download"] = (text.encode("utf-8-sig"), filename)


# -----------------------------------------------------------------------------
# Per-browser-session screen state (built once, reused across reruns)
# -----------------------------------------------------------------------------
if "list_store" not in st.session_state:
    api = get_stock_api()
    list_store = ListStore(api)
    st.session_state["list_store"] = list_store
    st.session_state["orchestrator"] = CrudOrchestrator(api, list_store)
    st.session_state["exporter"] = StockExporter(list_store, SessionDownload())
    with st.spinner("読み込み中..."):
        run(list_store.load())

list_store: ListStore = st.session_state["list_store"]
orchestrator: CrudOrchestrator = st.session_state["orchestrator"]
exporter: StockExporter = st.session_state["exporter"]

# -----------------------------------------------------------------------------
# Header: title, new record, CSV export
# -----------------------------------------------------------------------------
title_col, new_col, csv_col = st.columns([6, 1, 1])
title_col.title("在庫管理")
if new_col.button("新規登録", disabled=orchestrator.session.is_active):
    orchestrator.open_create()
    st.rerun()
if csv_col.button("出力中..." if exporter.is_exporting else "CSV出力", disabled=not exporter.can_export):
    exporter.export()

pending = st.session_state.pop("pending_download", None)
if pending:
    data, filename = pending
    st.download_button("ダウンロード", data=data, file_name=filename, mime="text/csv")
if exporter.error:
    st.error(exporter.error)

# -----------------------------------------------------------------------------
# Notification slot
# -----------------------------------------------------------------------------
current = orchestrator.notifications.current()
if current is not None:
    show = st.success if current.kind is NotificationKind.SUCCESS else st.error
    msg_col, close_col = st.columns([10, 1])
    with msg_col:
        show(current.message)
    if close_col.button("×", key="close_notification"):
        orchestrator.notifications.close()
        st.rerun()

# -----------------------------------------------------------------------------
# Active dialog (create / edit / delete confirmation)
# -----------------------------------------------------------------------------
session = orchestrator.session
if session.kind in (DialogKind.CREATING, DialogKind.EDITING):
    form = orchestrator.form
    creating = session.kind is DialogKind.CREATING
    busy = orchestrator.in_flight
    with st.container(border=True):
        st.subheader("新規在庫登録" if creating else "在庫情報編集")
        target_id = session.target.id if session.target is not None else "new"
        with st.form(f"stock_form_{target_id}"):
            values = form.values
            name = st.text_input("商品名", value=values["product_name"], max_chars=100, disabled=busy)
            price = st.text_input("価格 (円)", value=str(values["price"]), disabled=busy)
            quantity = st.text_input("在庫数 (個)", value=str(values["quantity"]), disabled=busy)
            for message in form.errors.values():
                st.caption(f":red[{message}]")
            submitted = st.form_submit_button("登録" if creating else "更新", disabled=busy)
        if submitted:
            form.set_field("product_name", name)
            form.set_field("price", price)
            form.set_field("quantity", quantity)
            with st.spinner("送信中..."):
                run(orchestrator.submit())
            st.rerun()
        if st.button("キャンセル", disabled=busy):
            orchestrator.cancel()
            st.rerun()

elif session.kind is DialogKind.CONFIRMING_DELETE:
    target = session.target
    with st.container(border=True):
        st.subheader("在庫削除")
        st.write(f"「{target.name or target.id}」を削除しますか？")
        yes_col, no_col = st.columns(2)
        if yes_col.button("削除", type="primary", disabled=orchestrator.deleting):
            with st.spinner("削除中..."):
                run(orchestrator.confirm_delete())
            st.rerun()
        if no_col.button("キャンセル", key="cancel_delete", disabled=orchestrator.deleting):
            orchestrator.cancel()
            st.rerun()

# -----------------------------------------------------------------------------
# Stock table (loading / error states replace it)
# -----------------------------------------------------------------------------
state = list_store.state
if state.is_loading:
    st.info("読み込み中...")
    st.stop()

if state.error:
    st.error(state.error)
    if st.button("再試行"):
        with st.spinner("読み込み中..."):
            run(list_store.refetch())
        st.rerun()
    st.stop()

header = st.columns([2, 4, 2, 1, 2, 2, 2])
for col, label in zip(header, ["ID", "商品名", "価格", "在庫数", "作成日時", "更新日時", ""]):
    col.markdown(f"**{label}**")

for record in state.records:
    cols = st.columns([2, 4, 2, 1, 2, 2, 2])
    cols[0].write(str(record.id) if record.id is not None else "-")
    cols[1].write(record.name or "-")
    cols[2].write(format_price(record.price) or "-")
    cols[3].write("-" if record.quantity is None else record.quantity)
    cols[4].write(format_timestamp(record.created_at) or "-")
    cols[5].write(format_timestamp(record.updated_at) or "-")
    # Rows without an id get no actions
    if not orchestrator.can_delete(record):
        continue
    edit_col, delete_col = cols[6].columns(2)
    if edit_col.button(
        "編集", key=f"edit_{record.id}", disabled=session.is_active or not orchestrator.can_edit(record)
    ):
        orchestrator.open_edit(record)
        st.rerun()
    if delete_col.button("削除", key=f"delete_{record.id}", disabled=session.is_active):
        orchestrator.open_delete(record)
        st.rerun()

if not state.records:
    st.info("在庫データがありません")

# -----------------------------------------------------------------------------
# Pagination
# -----------------------------------------------------------------------------
prev_col, page_col, next_col, size_col = st.columns([1, 2, 1, 2])
if prev_col.button("前へ", disabled=state.page_index == 0):
    run(list_store.set_page(state.page_index - 1))
    st.rerun()
page_col.write(f"{state.page_index + 1} ページ目")
if next_col.button("次へ", disabled=not state.has_next_page):
    run(list_store.set_page(state.page_index + 1))
    st.rerun()
options = list_store.page_size_options
new_size = size_col.selectbox(
    "表示件数",
    options,
    index=options.index(state.page_size) if state.page_size in options else 0,
)
if new_size != state.page_size:
    run(list_store.set_page_size(new_size))
    st.rerun()

with st.expander("データソース"):
    st.write(
        f"Stock API: **{config.api_kind}** "
        + (f"(`{config.api_base_url}`)" if config.api_kind == "http" else f"(`{config.data_dir}/stocks.csv`)")
    )
    st.dataframe(pd.DataFrame([r.model_dump() for r in state.records]), use_container_width=True)
