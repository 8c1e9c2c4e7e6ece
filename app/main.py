import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
from datetime import date

import streamlit as st

from kakeibo.categories import EXPENSE_CATEGORIES, CategoryIcon, icon_for
from kakeibo.charts import category_pie, expenses_frame, trend_bar
from kakeibo.domain import ExpenseForm
from kakeibo.events import NOTIFICATION, EventBus, register_default_handlers
from kakeibo.filters import by_category, by_text
from kakeibo.formatters import format_currency, format_percent_change
from kakeibo.months import MONTH_RANGES, format_month, parse_date
from kakeibo.startup import init_app
from kakeibo.viewmodels import (
    AvailableMonthsModel,
    ChatModel,
    DateNavigation,
    ExpenseSummaryModel,
    ExpensesModel,
    MonthlyReportModel,
    MonthlySummaryModel,
    RefreshTrigger,
    TrendModel,
)

ICON_EMOJI = {
    CategoryIcon.UTENSILS: "🍱",
    CategoryIcon.BUS: "🚃",
    CategoryIcon.HOME: "🏠",
    CategoryIcon.ZAP: "💡",
    CategoryIcon.PHONE: "📱",
    CategoryIcon.GAMEPAD: "🎮",
    CategoryIcon.HEART_PULSE: "🏥",
    CategoryIcon.SHIRT: "👕",
    CategoryIcon.BASKET: "🧺",
    CategoryIcon.TRENDING_UP: "📈",
    CategoryIcon.BOOK: "📚",
    CategoryIcon.OTHER: "📦",
}
AUTO_CATEGORY = "🤖 メモから自動判定"
TOAST_ICONS = {"success": "✅", "error": "⚠️", "info": "ℹ️"}

st.set_page_config(page_title="家計簿", layout="wide")

ctx = init_app()


def run(coro):
    return asyncio.run(coro)


def emoji(category: str) -> str:
    return ICON_EMOJI[icon_for(category)]


if "bus" not in st.session_state:
    bus = EventBus()
    register_default_handlers(bus)

    def toast_handler(event, payload):
        st.toast(payload.get("message", ""), icon=TOAST_ICONS.get(payload.get("level"), "ℹ️"))
        return {"shown": True}

    bus.subscribe(NOTIFICATION, toast_handler)
    st.session_state.bus = bus

bus = st.session_state.bus

if "trigger" not in st.session_state:
    trigger = RefreshTrigger()
    st.session_state.trigger = trigger
    st.session_state.nav = DateNavigation()
    st.session_state.summary_vm = ExpenseSummaryModel(ctx.api, bus)
    st.session_state.trend_vm = TrendModel(ctx.api, ctx.settings.trend_months, bus)
    st.session_state.month_summary_vm = MonthlySummaryModel(ctx.api, bus)
    st.session_state.expenses_vm = ExpensesModel(ctx.api, bus, trigger)
    st.session_state.months_vm = AvailableMonthsModel(ctx.api, bus)
    st.session_state.report_vm = MonthlyReportModel(ctx.api)
    st.session_state.chat_vm = ChatModel(ctx.api, bus)

trigger = st.session_state.trigger
nav = st.session_state.nav
summary_vm = st.session_state.summary_vm
trend_vm = st.session_state.trend_vm
month_summary_vm = st.session_state.month_summary_vm
expenses_vm = st.session_state.expenses_vm
months_vm = st.session_state.months_vm
report_vm = st.session_state.report_vm
chat_vm = st.session_state.chat_vm

st.sidebar.markdown("### 📒 家計簿")
if ctx.settings.uses_backend:
    st.sidebar.caption(f"API: {ctx.settings.api_base_url}")
else:
    st.sidebar.caption(f"ローカルデータ: {ctx.settings.seed_path}")

menu = st.sidebar.radio(
    "メニュー",
    ["🏠 概要", "🧾 支出", "📑 レポート", "💬 アシスタント"]
)


async def refresh_after_mutation():
    await trigger.apply("overview", summary_vm.refetch, trend_vm.refetch, month_summary_vm.refetch)
    await trigger.apply("months", months_vm.refetch)


if menu == "🏠 概要":
    st.title("🏠 概要")
    run(refresh_after_mutation())

    summary = run(summary_vm.watch())
    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("今月の支出", format_currency(summary.monthly_total),
                  delta=None if summary.monthly_change is None else format_percent_change(summary.monthly_change),
                  delta_color="inverse")
    with k2:
        st.metric("件数", f"{summary.transaction_count}件")
    with k3:
        st.metric("1日あたり", format_currency(summary.daily_average))
    with k4:
        st.metric("前月", format_currency(summary_vm.previous.data.total))

    col_pie, col_trend = st.columns([2, 3])
    with col_pie:
        st.subheader("カテゴリー別")
        current = run(month_summary_vm.watch(nav.selected_month))
        st.caption(format_month(nav.selected_month))
        if current.count:
            st.plotly_chart(category_pie(current), use_container_width=True)
            for item in current.by_category:
                st.markdown(f"{emoji(item.category)} {item.category}: **{format_currency(item.amount)}**")
        else:
            st.info("この月の支出はありません。")

    with col_trend:
        st.subheader("推移")
        months_to_show = st.select_slider(
            "表示期間（月）",
            options=list(MONTH_RANGES),
            value=trend_vm.months_to_show,
        )
        rows = run(trend_vm.watch(months_to_show))
        if trend_vm.categories:
            st.plotly_chart(trend_bar(rows, trend_vm.categories), use_container_width=True)
        else:
            st.info("表示できるデータがありません。")

elif menu == "🧾 支出":
    st.title("🧾 支出")
    run(refresh_after_mutation())

    c_prev, c_label, c_next, c_now = st.columns([1, 3, 1, 1])
    with c_prev:
        if st.button("◀ 前月"):
            nav.go_to_previous_month()
    with c_next:
        if st.button("翌月 ▶", disabled=nav.is_current_month):
            nav.go_to_next_month()
    with c_now:
        if st.button("今月"):
            nav.go_to_current_month()
    with c_label:
        st.subheader(format_month(nav.selected_month))

    available = run(months_vm.watch())
    if available:
        st.caption("記録のある月: " + ", ".join(format_month(m) for m in available[:12]))

    expenses = run(expenses_vm.watch(nav.selected_month))

    f1, f2 = st.columns(2)
    with f1:
        selected_categories = st.multiselect("カテゴリー", list(EXPENSE_CATEGORIES), default=[])
    with f2:
        query = st.text_input("検索")

    shown = list(expenses)
    if selected_categories:
        shown = [e for e in shown if any(by_category(c)(e) for c in selected_categories)]
    if query:
        shown = list(filter(by_text(query), shown))

    df = expenses_frame(shown)
    if not df.empty:
        disp = df.assign(
            date=df["date"].dt.strftime("%Y-%m-%d").fillna("-"),
            category=df["category"].map(lambda c: f"{emoji(c)} {c}"),
            amount=df["amount"].map(format_currency),
        ).drop(columns=["icon"])
        st.dataframe(disp.set_index("id"), use_container_width=True)
        st.caption(f"合計 {format_currency(sum(e.amount for e in shown))}（{len(shown)}件）")
        st.download_button(
            "⬇️ CSVをダウンロード",
            df.to_csv(index=False),
            file_name=f"expenses_{nav.selected_month}.csv",
            mime="text/csv"
        )
    else:
        st.info("該当する支出はありません。")

    st.divider()

    st.subheader("➕ 支出を追加")
    with st.form("add_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            day = st.date_input("日付", value=date.today(), max_value=date.today())
            amount = st.number_input("金額（円）", min_value=0, step=100)
        with col2:
            category = st.selectbox("カテゴリー", [AUTO_CATEGORY, *EXPENSE_CATEGORIES])
            description = st.text_input("メモ")
        if st.form_submit_button("追加"):
            if category == AUTO_CATEGORY:
                category = run(expenses_vm.suggest_category(description))
            form = ExpenseForm(date=day.isoformat(), category=category, amount=int(amount), description=description)
            if run(expenses_vm.add(form)):
                st.rerun()

    if expenses:
        st.subheader("✏️ 編集・削除")
        labels = {
            e.id: f"{e.date} {emoji(e.category)} {e.category} {format_currency(e.amount)} {e.description}"
            for e in expenses
        }
        selected_id = st.selectbox("対象の支出", list(labels), format_func=labels.get)
        target = next(e for e in expenses if e.id == selected_id)
        with st.form("edit_form"):
            col1, col2 = st.columns(2)
            with col1:
                new_day = st.date_input("日付", value=parse_date(target.date, date.today()), max_value=date.today())
                new_amount = st.number_input("金額（円）", min_value=0, step=100, value=target.amount)
            with col2:
                categories = list(EXPENSE_CATEGORIES)
                index = categories.index(target.category) if target.category in categories else len(categories) - 1
                new_category = st.selectbox("カテゴリー", categories, index=index)
                new_description = st.text_input("メモ", value=target.description)
            b1, b2 = st.columns(2)
            with b1:
                save = st.form_submit_button("💾 更新")
            with b2:
                remove = st.form_submit_button("🗑 削除")
        if save:
            form = ExpenseForm(
                date=new_day.isoformat(),
                category=new_category,
                amount=int(new_amount),
                description=new_description,
            )
            if run(expenses_vm.update(target.id, form)):
                st.rerun()
        if remove:
            if run(expenses_vm.delete(target.id)):
                st.rerun()

elif menu == "📑 レポート":
    st.title("📑 月次レポート")
    months = run(months_vm.watch())
    if not months:
        st.info("支出データがまだありません。")
    else:
        month = st.selectbox("対象月", months, format_func=format_month)
        if report_vm.report is None or report_vm.report.month != month:
            report_vm.clear()
            run(report_vm.load_cached(month))

        c1, c2 = st.columns(2)
        with c1:
            if st.button("📝 レポートを作成", disabled=report_vm.report is not None):
                with st.spinner("作成中..."):
                    run(report_vm.fetch(month))
        with c2:
            if st.button("🔄 再生成", disabled=report_vm.report is None):
                with st.spinner("再生成中..."):
                    run(report_vm.regenerate(month))

        if report_vm.error:
            st.error(report_vm.error)
        report = report_vm.report
        if report is not None:
            st.markdown(report.summary)
            if report.suggestions:
                st.subheader("💡 提案")
                for s in report.suggestions:
                    st.markdown(f"- {s}")
            if report.generated_at:
                st.caption(f"作成日時: {report.generated_at}")

elif menu == "💬 アシスタント":
    st.title("💬 アシスタント")
    history = run(chat_vm.watch())
    for m in history:
        with st.chat_message("user" if m.role == "user" else "assistant"):
            st.markdown(m.content)

    prompt = st.chat_input("家計について質問してください")
    if prompt:
        run(chat_vm.send(prompt))
        st.rerun()
