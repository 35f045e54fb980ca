"""
Streamlit Frontend for the Expense Tracker

Pages:
1. Expenses - enter expenses, fix Bangla wording, generate the PDF and save
2. Admin - search every stored expense and download a PDF of the results
3. Settings - which services are configured

DESIGN PRINCIPLES:
1. Expenses stay local until the user clicks "Generate PDF & Save"
2. Every failure is shown once, in plain language
3. Nothing is retried automatically; the user repeats the action
"""

import asyncio
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

import streamlit as st

from expense_tracker.agents import TranslationError
from expense_tracker.audit import create_correlation_id
from expense_tracker.models.expense import (
    Approver,
    Currency,
    ExpenseDraft,
    ExpenseRecord,
    GeolocationFix,
    KnownCategory,
)
from expense_tracker.orchestrator import (
    NO_TRANSLATION_TO_OPTIMIZE,
    ExpenseReportFlow,
    create_app_components,
)
from expense_tracker.queries import filter_expenses
from expense_tracker.reports import ReportGenerationError, format_money
from expense_tracker.services.storage import StorageError


# Page configuration
st.set_page_config(
    page_title="SNBD HOST Expenses",
    page_icon="🧾",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .stDownloadButton>button {
        width: 100%;
        margin-top: 10px;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_flow() -> ExpenseReportFlow:
    """Get or create the application flow (cached)."""
    return create_app_components()


def expenses_table(records: list[ExpenseRecord]) -> list[dict]:
    return [
        {
            "Date": record.date.strftime("%Y-%m-%d"),
            "Expense For": record.category_label,
            "Employee / Panel": record.employee_name or record.panel_name or "",
            "Details": record.details,
            "Amount": format_money(record.amount),
            "Currency": record.currency,
            "Desc (EN)": record.description_english,
            "Desc (BN)": record.description_bangla,
            "Paid By": record.paid_by,
            "Approved By": record.approved_by,
        }
        for record in records
    ]


def render_location_sidebar() -> Optional[GeolocationFix]:
    """Optional location printed on the report and given to the assistant."""
    st.sidebar.markdown("### 📍 Location")
    use_location = st.sidebar.checkbox("Include location", value=False)
    if not use_location:
        return None

    latitude = st.sidebar.number_input(
        "Latitude", min_value=-90.0, max_value=90.0, value=23.8103, format="%.4f",
    )
    longitude = st.sidebar.number_input(
        "Longitude", min_value=-180.0, max_value=180.0, value=90.4125, format="%.4f",
    )
    return GeolocationFix(latitude=latitude, longitude=longitude)


def main():
    """Main application entry point."""
    flow = get_flow()

    st.sidebar.title("🧾 SNBD HOST Expenses")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🧾 Expenses", "🗂️ Admin", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    location = render_location_sidebar()

    if page == "🧾 Expenses":
        render_expenses_page(flow, location)
    elif page == "🗂️ Admin":
        render_admin_page(flow)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_expense_form(flow: ExpenseReportFlow, location: Optional[GeolocationFix]):
    st.markdown("### Add Expense")

    category = st.selectbox(
        "Expense For *",
        options=[c.value for c in KnownCategory],
    )

    # Outside the form so the conditional field appears as soon as the category changes
    employee_name = None
    panel_name = None
    if category == KnownCategory.EMPLOYEE_EXPENSES.value:
        employee_name = st.text_input("Employee Name *")
    elif category == KnownCategory.DOMAIN_PANEL_FUND.value:
        panel_name = st.text_input("Domain Panel Name *")

    with st.form("expense_form", clear_on_submit=True):
        details = st.text_area("Other Expense Details *")

        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input("Amount *", min_value=0.0, step=0.01, format="%.2f")
            expense_date = st.date_input("Date *", value=date.today())
            paid_by = st.text_input("Paid By *")
        with col2:
            currency = st.selectbox("Currency *", options=[c.value for c in Currency])
            approved_by = st.selectbox("Approved By *", options=[a.value for a in Approver])

        description_english = st.text_area("Description (English) *")
        description_bangla = st.text_area("Description (Bangla) *")

        submitted = st.form_submit_button("➕ Add Expense", type="primary")

    if submitted:
        draft = ExpenseDraft(
            category=category,
            employee_name=employee_name,
            panel_name=panel_name,
            details=details,
            amount=Decimal(str(amount)),
            currency=currency,
            description_english=description_english,
            description_bangla=description_bangla,
            date=datetime.combine(expense_date, time()),
            paid_by=paid_by,
            approved_by=approved_by,
        )
        result = flow.validate_draft(draft)
        for issue in result.issues:
            if issue.severity == "error":
                st.error(issue.message)
            else:
                st.warning(issue.message)

        if result.is_valid:
            st.session_state.expenses = flow.add_expense(
                st.session_state.expenses, draft, location=location,
            )
            st.success(
                f"{category} for {amount:.2f} {currency} added. "
                "Remember to 'Generate PDF & Save' to save it."
            )


def render_translation_helper(flow: ExpenseReportFlow, location: Optional[GeolocationFix]):
    st.markdown("### 🪄 Tax Optimization Assistant")

    if not flow.has_assistant:
        st.info("The translation assistant is not configured (set GEMINI_API_KEY).")
        return

    expenses = st.session_state.expenses
    selected = st.selectbox(
        "Expense",
        options=expenses,
        format_func=lambda r: f"{r.category_label} - {format_money(r.amount)} {r.currency} - {r.description_english[:40]}",
    )

    if selected and not selected.description_bangla:
        st.info(NO_TRANSLATION_TO_OPTIMIZE)
        return

    if st.button("Suggest Bangla wording") and selected:
        with st.spinner("Fetching optimization suggestions..."):
            try:
                suggestion = run_async(
                    flow.suggest_translation(selected, fallback_location=location)
                )
                st.session_state.suggestion = (selected.id, suggestion)
            except TranslationError as e:
                st.error(f"Tax Optimization Failed: {e}")

    if st.session_state.get("suggestion"):
        expense_id, suggestion = st.session_state.suggestion
        optimized = st.text_area("Optimized Bangla Translation", value=suggestion.optimized_translation)
        st.caption(f"Reasoning: {suggestion.reasoning}")
        if st.button("Update Description"):
            st.session_state.expenses = flow.update_bangla_description(
                st.session_state.expenses, expense_id, optimized,
            )
            st.session_state.suggestion = None
            st.success("Bangla description has been updated locally.")
            st.rerun()


def render_expenses_page(flow: ExpenseReportFlow, location: Optional[GeolocationFix]):
    """Render the expense entry page."""
    st.title("🧾 Expenses")

    if "expenses" not in st.session_state:
        st.session_state.expenses = []
    if "report" not in st.session_state:
        st.session_state.report = None

    render_expense_form(flow, location)

    st.markdown("---")
    st.markdown(f"### Current Expenses ({len(st.session_state.expenses)})")

    if not st.session_state.expenses:
        st.info("No expenses added yet. Use the form above to add one.")
        return

    st.dataframe(expenses_table(st.session_state.expenses), use_container_width=True)

    render_translation_helper(flow, location)

    st.markdown("---")
    if st.button("📄 Generate PDF & Save", type="primary"):
        correlation_id = create_correlation_id()
        with st.spinner("Generating PDF and saving expenses..."):
            try:
                st.session_state.report = flow.generate_report(
                    st.session_state.expenses,
                    location=location,
                    correlation_id=correlation_id,
                )
            except ReportGenerationError as e:
                st.session_state.report = None
                st.error(f"PDF Generation Failed: {e}")
                st.stop()

            outcome = run_async(
                flow.save_expenses(st.session_state.expenses, correlation_id=correlation_id)
            )

        if outcome.success:
            st.success(outcome.message)
        elif outcome.error_kind == "configuration":
            st.error(f"Configuration problem: {outcome.message}")
        else:
            st.error(
                f"The PDF was generated, but saving failed: {outcome.message} "
                "Your expenses are still here; try again."
            )

    if st.session_state.report:
        pdf_bytes, filename = st.session_state.report
        st.download_button(
            "⬇️ Download PDF",
            data=pdf_bytes,
            file_name=filename,
            mime="application/pdf",
        )


def render_admin_page(flow: ExpenseReportFlow):
    """Render the admin overview of stored expenses."""
    st.title("🗂️ Admin Dashboard - Expense Overview")

    if "admin_expenses" not in st.session_state or st.button("🔄 Reload"):
        with st.spinner("Loading expenses, please wait..."):
            try:
                st.session_state.admin_expenses = run_async(flow.fetch_expenses())
                st.session_state.admin_error = None
            except StorageError as e:
                st.session_state.admin_expenses = []
                st.session_state.admin_error = str(e)

    if st.session_state.get("admin_error"):
        st.error(f"Failed to Load Expenses: {st.session_state.admin_error}")
        return

    all_expenses = st.session_state.admin_expenses
    if not all_expenses:
        st.info("No expenses have been recorded yet.")
        return

    search_term = st.text_input(
        "Search",
        placeholder="Search by any field (e.g., VPS, John Doe, 100)...",
    )
    filtered = filter_expenses(all_expenses, search_term)

    if not filtered:
        st.info(f'No expenses match your search term "{search_term}".')
        return

    st.dataframe(expenses_table(filtered), use_container_width=True)

    try:
        pdf_bytes, filename = flow.generate_report(filtered, filename_prefix="Admin")
    except ReportGenerationError as e:
        st.error(f"PDF Generation Failed: {e}")
        return

    st.download_button(
        f"⬇️ Download PDF ({len(filtered)})",
        data=pdf_bytes,
        file_name=filename,
        mime="application/pdf",
    )


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    from expense_tracker.config import validate_all_settings

    status = validate_all_settings()

    services = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("Gemini (Translation Assistant)", "gemini"),
        ("PDF Report", "report"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your API keys. "
        "See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
