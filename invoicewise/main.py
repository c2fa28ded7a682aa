"""
InvoiceWise - Main Streamlit UI

A browser-based invoice creator with AI line item suggestions.

Features:
- Logo upload, addresses, invoice number, issue/due dates
- Editable line items with live totals and tax
- AI suggestions per line item (Ollama, LM Studio, Deepseek)
- Printable invoice (save as PDF from the browser's print dialog)
"""

import logging
import sys
from pathlib import Path

import pandas as pd
import streamlit as st
import streamlit.components.v1 as components

# Add project root to path so `streamlit run invoicewise/main.py` works
sys.path.insert(0, str(Path(__file__).parent.parent))

from invoicewise.config import (
    LLMProvider,
    session_config,
    validate_system_requirements,
)
from invoicewise.export.html import HtmlExporter
from invoicewise.llm.client import LLMClient
from invoicewise.logo import LogoError, decode_logo, prepare_logo
from invoicewise.models.invoice import Invoice, ItemSuggestion
from invoicewise.suggestions import (
    NO_KEYWORDS_MESSAGE,
    SUGGESTION_FAILED_MESSAGE,
    EmptyKeywordsError,
    SuggestionError,
    suggest_items,
)
from invoicewise.totals import calculate_totals, format_date, format_money

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def seed_widget_state(values: dict):
    """Give keyed widgets their starting value once; afterwards the widget owns it."""
    for key, value in values.items():
        st.session_state.setdefault(key, value)


def init_session_state():
    """Initialize Streamlit session state."""
    if "config" not in st.session_state:
        st.session_state.config = session_config()

    if "invoice" not in st.session_state:
        st.session_state.invoice = Invoice.new(st.session_state.config.invoice)

    # Per line item: latest suggestions and whether a request is running
    if "suggestions" not in st.session_state:
        st.session_state.suggestions = {}

    if "suggesting" not in st.session_state:
        st.session_state.suggesting = {}

    if "logo_file_id" not in st.session_state:
        st.session_state.logo_file_id = None

    if "system_validated" not in st.session_state:
        st.session_state.system_validated = False

    if "validation_results" not in st.session_state:
        st.session_state.validation_results = None


def validate_system():
    """Probe the LLM providers once per session."""
    if not st.session_state.system_validated:
        with st.spinner("Checking AI providers..."):
            results = validate_system_requirements(st.session_state.config)
            st.session_state.validation_results = results
            st.session_state.system_validated = True

    return st.session_state.validation_results


def render_sidebar():
    """Render the settings sidebar."""
    with st.sidebar:
        st.header("⚙️ Settings")

        st.subheader("AI Suggestions Provider")

        results = st.session_state.validation_results or {}

        provider_names = {
            LLMProvider.OLLAMA: "Ollama (Local)",
            LLMProvider.LM_STUDIO: "LM Studio (Local)",
            LLMProvider.DEEPSEEK: "Deepseek (Cloud)",
        }

        all_providers = list(provider_names)
        default_provider = st.session_state.config.default_llm_provider

        selected_provider = st.selectbox(
            "Select Provider",
            options=all_providers,
            index=all_providers.index(default_provider),
            format_func=lambda x: provider_names.get(x, x.value),
            key="provider_selection",
        )
        st.session_state.selected_provider = selected_provider

        # Show provider status
        if selected_provider == LLMProvider.OLLAMA:
            if results.get("ollama", {}).get("available"):
                st.success("✅ Ollama is running")
            else:
                st.warning("⚠️ Ollama not running. Start with: `ollama serve`")
        elif selected_provider == LLMProvider.LM_STUDIO:
            if results.get("lm_studio", {}).get("available"):
                st.success("✅ LM Studio is running")
            else:
                st.warning("⚠️ LM Studio not running. Start the local server.")
        elif selected_provider == LLMProvider.DEEPSEEK:
            if results.get("deepseek", {}).get("configured"):
                st.success("✅ Deepseek API configured")
            else:
                st.warning("⚠️ Deepseek API key not set in .env")

        st.divider()

        config = st.session_state.config
        if selected_provider == LLMProvider.OLLAMA:
            st.subheader("Ollama Settings")

            models = results.get("ollama", {}).get("models", [])
            if models:
                st.selectbox(
                    "Model",
                    options=models,
                    index=models.index(config.ollama.model) if config.ollama.model in models else 0,
                    key="ollama_model",
                    help="Model used to generate suggestions",
                )
            else:
                st.text_input(
                    "Model Name",
                    value=config.ollama.model,
                    key="ollama_model_manual",
                    help="Enter the model name (e.g., llama3.2, mistral, etc.)",
                )

            st.text_input(
                "Ollama URL",
                value=config.ollama.base_url,
                key="ollama_url",
                help="Usually http://localhost:11434",
            )

        elif selected_provider == LLMProvider.LM_STUDIO:
            st.subheader("LM Studio Settings")

            st.text_input(
                "Model Name",
                value=config.lm_studio.model or "",
                key="lm_studio_model",
                placeholder="Leave empty to use loaded model",
                help="The model loaded in LM Studio",
            )

            st.text_input(
                "LM Studio URL",
                value=config.lm_studio.base_url,
                key="lm_studio_url",
                help="Usually http://localhost:1234/v1",
            )

        elif selected_provider == LLMProvider.DEEPSEEK:
            st.subheader("Deepseek Settings")

            st.text_input(
                "API Key",
                value=config.deepseek.api_key or "",
                key="deepseek_api_key",
                type="password",
                help="Your Deepseek API key",
            )

            st.text_input(
                "Model",
                value=config.deepseek.model,
                key="deepseek_model",
                help="e.g., deepseek-chat",
            )

        st.divider()

        st.subheader("System Status")

        if st.button("🔄 Refresh Status"):
            st.session_state.system_validated = False
            st.rerun()


def apply_provider_settings() -> LLMProvider:
    """Copy sidebar settings onto the session config and return the selected provider."""
    provider = st.session_state.get("selected_provider") or st.session_state.config.default_llm_provider
    config = st.session_state.config

    if provider == LLMProvider.OLLAMA:
        if model := st.session_state.get("ollama_model"):
            config.ollama.model = model
        elif model := st.session_state.get("ollama_model_manual"):
            config.ollama.model = model
        if url := st.session_state.get("ollama_url"):
            config.ollama.base_url = url

    elif provider == LLMProvider.LM_STUDIO:
        if model := st.session_state.get("lm_studio_model"):
            config.lm_studio.model = model
        if url := st.session_state.get("lm_studio_url"):
            config.lm_studio.base_url = url

    elif provider == LLMProvider.DEEPSEEK:
        if api_key := st.session_state.get("deepseek_api_key"):
            config.deepseek.api_key = api_key
        if model := st.session_state.get("deepseek_model"):
            config.deepseek.model = model

    return provider


def request_suggestions(item_id: int):
    """Form callback: fetch suggestions for one line item."""
    keywords = st.session_state.get(f"ai_keywords_{item_id}", "")
    if not keywords.strip():
        st.toast(f"No keywords. {NO_KEYWORDS_MESSAGE}", icon="⚠️")
        return

    provider = apply_provider_settings()
    config = st.session_state.config
    client = LLMClient(config=config, preferred_provider=provider)

    st.session_state.suggesting[item_id] = True
    st.session_state.suggestions[item_id] = []
    try:
        with st.spinner("Getting suggestions..."):
            st.session_state.suggestions[item_id] = suggest_items(
                keywords,
                client=client,
                provider=provider,
                config=config,
            )
    except EmptyKeywordsError:
        st.toast(f"No keywords. {NO_KEYWORDS_MESSAGE}", icon="⚠️")
    except SuggestionError:
        st.toast(f"AI Error. {SUGGESTION_FAILED_MESSAGE}", icon="❌")
    finally:
        st.session_state.suggesting[item_id] = False


def select_suggestion(item_id: int, suggestion: ItemSuggestion):
    """Button callback: copy a suggestion into the line item and reset its popover."""
    invoice = st.session_state.invoice
    invoice.apply_suggestion(item_id, suggestion)

    # Widget state wins over the model on the next run, so update it too
    st.session_state[f"desc_{item_id}"] = suggestion.description
    st.session_state[f"amount_{item_id}"] = float(suggestion.amount)

    st.session_state[f"ai_keywords_{item_id}"] = ""
    st.session_state.suggestions.pop(item_id, None)


def add_line_item():
    st.session_state.invoice.add_line_item()


def remove_line_item(item_id: int):
    st.session_state.invoice.remove_line_item(item_id)
    st.session_state.suggestions.pop(item_id, None)
    st.session_state.suggesting.pop(item_id, None)
    for key in (f"desc_{item_id}", f"qty_{item_id}", f"amount_{item_id}", f"ai_keywords_{item_id}"):
        st.session_state.pop(key, None)


def render_logo_upload(invoice: Invoice):
    """Logo picker; the image is stored on the invoice as a data URL."""
    uploaded_logo = st.file_uploader(
        "Upload Logo",
        type=["png", "jpg", "jpeg", "gif", "webp", "bmp"],
        key="logo_upload",
    )

    if uploaded_logo is not None and uploaded_logo.file_id != st.session_state.logo_file_id:
        max_bytes = st.session_state.config.max_logo_file_size_mb * 1024 * 1024
        if uploaded_logo.size > max_bytes:
            st.error(f"Logo must be smaller than {st.session_state.config.max_logo_file_size_mb} MB")
        else:
            try:
                invoice.logo = prepare_logo(
                    uploaded_logo.getvalue(),
                    max_size=st.session_state.config.max_logo_size_px,
                )
                st.session_state.logo_file_id = uploaded_logo.file_id
            except LogoError as e:
                logger.warning(f"Logo upload rejected: {e}")
                st.error("That file could not be read as an image")

    if invoice.logo:
        st.image(decode_logo(invoice.logo), caption="Company Logo", width=160)


def render_header_section():
    """Render logo, addresses, invoice number and dates."""
    invoice = st.session_state.invoice
    seed_widget_state({
        "from_address": invoice.from_address,
        "invoice_number": invoice.invoice_number,
        "issue_date": invoice.issue_date,
        "due_date": invoice.due_date,
        "to_address": invoice.to_address,
    })

    col1, col2 = st.columns(2)

    with col1:
        render_logo_upload(invoice)
        invoice.from_address = st.text_area(
            "From",
            placeholder="Your Company & Address",
            height=110,
            key="from_address",
        )

    with col2:
        st.markdown("## INVOICE")
        invoice.invoice_number = st.text_input(
            "Invoice #",
            key="invoice_number",
        )
        invoice.issue_date = st.date_input(
            "Issue Date",
            key="issue_date",
        )
        invoice.due_date = st.date_input(
            "Due Date",
            key="due_date",
        )

    invoice.to_address = st.text_area(
        "Bill To",
        placeholder="Client's Name & Address",
        height=110,
        key="to_address",
    )


def render_suggestion_popover(item_id: int):
    """AI Suggestions popover for one line item."""
    with st.popover("✨", help="AI Suggestions"):
        st.markdown("**AI Suggestions**")
        st.caption("Enter keywords to get item suggestions.")

        with st.form(f"suggest_form_{item_id}"):
            st.text_input(
                "Keywords",
                placeholder="e.g. 'logo design'",
                key=f"ai_keywords_{item_id}",
                label_visibility="collapsed",
            )
            st.form_submit_button(
                "Get Suggestions",
                on_click=request_suggestions,
                args=(item_id,),
                disabled=st.session_state.suggesting.get(item_id, False),
                use_container_width=True,
            )

        for index, suggestion in enumerate(st.session_state.suggestions.get(item_id, [])):
            st.button(
                f"{suggestion.description} · {format_money(suggestion.amount)}",
                key=f"suggestion_{item_id}_{index}",
                on_click=select_suggestion,
                args=(item_id, suggestion),
                use_container_width=True,
            )


def render_line_items_section():
    """Render the editable line item table."""
    invoice = st.session_state.invoice

    header = st.columns([6, 1, 2, 2, 2, 1])
    header[0].markdown("**Description**")
    header[2].markdown("**Quantity**")
    header[3].markdown("**Price**")
    header[4].markdown("**Total**")

    for item in list(invoice.line_items):
        cols = st.columns([6, 1, 2, 2, 2, 1], vertical_alignment="center")

        # select_suggestion() writes these keys directly
        seed_widget_state({
            f"desc_{item.id}": item.description,
            f"qty_{item.id}": float(item.quantity),
            f"amount_{item.id}": float(item.amount),
        })

        with cols[0]:
            description = st.text_input(
                f"Description_{item.id}",
                placeholder="Item description",
                key=f"desc_{item.id}",
                label_visibility="collapsed",
            )
        with cols[1]:
            render_suggestion_popover(item.id)
        with cols[2]:
            quantity = st.number_input(
                f"Qty_{item.id}",
                min_value=0.0,
                step=1.0,
                format="%g",
                key=f"qty_{item.id}",
                label_visibility="collapsed",
            )
        with cols[3]:
            amount = st.number_input(
                f"Price_{item.id}",
                min_value=0.0,
                format="%.2f",
                key=f"amount_{item.id}",
                label_visibility="collapsed",
            )

        item = invoice.update_line_item(
            item.id,
            description=description,
            quantity=quantity,
            amount=amount,
        )

        with cols[4]:
            st.markdown(f"`{format_money(item.total)}`")
        with cols[5]:
            st.button(
                "🗑️",
                key=f"remove_{item.id}",
                on_click=remove_line_item,
                args=(item.id,),
                help="Remove line item",
            )

    st.button("➕ Add Line Item", on_click=add_line_item)


def render_totals_section():
    """Render subtotal, tax and total."""
    invoice = st.session_state.invoice
    seed_widget_state({"tax_rate": float(invoice.tax_rate), "notes": invoice.notes})

    _, col = st.columns([2, 1])
    with col:
        invoice.tax_rate = st.number_input(
            "Tax (%)",
            min_value=0.0,
            step=0.5,
            format="%g",
            key="tax_rate",
        )

        totals = calculate_totals(invoice.line_items, invoice.tax_rate)
        st.markdown(f"Subtotal: `{format_money(totals.subtotal)}`")
        st.markdown(f"Tax: `{format_money(totals.tax_amount)}`")
        st.markdown(f"### Total: {format_money(totals.total)}")

    invoice.notes = st.text_area(
        "Notes",
        placeholder="Any additional notes...",
        height=90,
        key="notes",
    )


def render_print_section():
    """Render preview and the printable download."""
    invoice = st.session_state.invoice
    exporter = HtmlExporter()

    st.header("🖨️ Print")

    col1, col2 = st.columns([2, 1])

    with col1:
        st.subheader("Line Items")
        rows = invoice.to_rows()
        if rows:
            st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
        else:
            st.info("No line items yet")

        with st.expander("Printable preview", expanded=False):
            components.html(exporter.render(invoice), height=900, scrolling=True)

    with col2:
        st.caption(
            f"Issued {format_date(invoice.issue_date)} · Due {format_date(invoice.due_date)}"
        )
        file_name = f"invoice-{invoice.invoice_number or 'draft'}.html"

        st.download_button(
            "⬇️ Download PDF",
            data=exporter.render(invoice, auto_print=True),
            file_name=file_name,
            mime="text/html",
            type="primary",
            use_container_width=True,
            help="Opens the invoice and your browser's print dialog; choose 'Save as PDF'",
        )

        if st.button("🖨️ Print now", use_container_width=True):
            # Printing from a zero-height frame prints only the invoice
            components.html(exporter.render(invoice, auto_print=True), height=0)


def main():
    """Main application entry point."""
    st.set_page_config(
        page_title="InvoiceWise",
        page_icon="🧾",
        layout="wide",
        initial_sidebar_state="collapsed",
    )

    init_session_state()

    st.title("🧾 InvoiceWise")

    validate_system()
    render_sidebar()

    st.divider()
    render_header_section()

    st.divider()
    render_line_items_section()

    st.divider()
    render_totals_section()

    st.divider()
    render_print_section()


if __name__ == "__main__":
    main()
