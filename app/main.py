"""
Streamlit Frontend for Storefront

Small-business owners use this to record what they sell and spend and
to see how the week is going.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Three ways to add a transaction: type it, say it, or snap the receipt
3. Clear error messages in simple language
4. Visual feedback for all operations
5. Nothing saved without an explicit "Save" action

Routing uses query parameters:
- ?view=confirm&token_hash=...&type=email  -> email verification
- ?view=resend                            -> request a new verification email
- ?verified=true                          -> landing after verification
- ?view=debug                             -> auth diagnostics (debug mode only)
"""

import asyncio
import threading
from urllib.parse import parse_qsl, urlparse

import streamlit as st

from storefront.accounts import VerificationFlow, VerificationState
from storefront.config import get_environment_info, get_settings, validate_all_settings
from storefront.diagnostics import DEFAULT_TEST_EMAIL, AuthDiagnostics
from storefront.models.account import SUPPORTED_CURRENCIES, ProfileUpdate
from storefront.models.diagnostics import DiagnosticStatus
from storefront.models.finance import CategoryDraft, InputMethod, TransactionDraft, TransactionType
from storefront.orchestrator import (
    AppComponents,
    FormValidationError,
    ProfileFlow,
    TransactionFlow,
    create_app_components,
)
from storefront.services import AuthError, ConfigurationError, InvalidImageError, StorageError
from storefront.services.auth import is_email_not_confirmed
from storefront.state import ColorScheme, Theme


# Page configuration
st.set_page_config(
    page_title="Storefront",
    page_icon="🏪",
    layout="wide",
    initial_sidebar_state="expanded",
)

SCHEME_COLORS = {
    ColorScheme.BLUE: "#2563eb",
    ColorScheme.GREEN: "#16a34a",
    ColorScheme.PURPLE: "#9333ea",
    ColorScheme.ORANGE: "#ea580c",
    ColorScheme.RED: "#dc2626",
}

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .info-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
    .income { color: #16a34a; font-weight: bold; }
    .expense { color: #dc2626; font-weight: bold; }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_event_loop() -> asyncio.AbstractEventLoop:
    """
    One event loop for the whole server, running in its own thread.

    The provider client and the verification redirect task live on it,
    so it must outlive individual script runs.
    """
    loop = asyncio.new_event_loop()
    threading.Thread(target=loop.run_forever, daemon=True).start()
    return loop


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    return asyncio.run_coroutine_threadsafe(coro, get_event_loop()).result()


async def _call(fn):
    return fn()


def call_on_loop(fn):
    """Run a plain callable on the event loop thread (tasks may only be cancelled there)."""
    return run_async(_call(fn))


def get_origin():
    headers = st.context.headers
    host = headers.get("Host")
    if not host:
        return None
    scheme = headers.get("X-Forwarded-Proto", "http")
    return f"{scheme}://{host}"


def get_components() -> AppComponents:
    """Get or create this browser session's components."""
    if "components" not in st.session_state:
        preferences = st.session_state.setdefault("preferences", {})
        try:
            components = create_app_components(
                use_backend=True,
                origin=get_origin(),
                preferences=preferences,
            )
        except Exception as e:
            st.error(f"Failed to initialize: {e}")
            components = create_app_components(use_backend=False, preferences=preferences)

        run_async(components.session.initialize())
        st.session_state.components = components
    return st.session_state.components


def navigate(path: str):
    """Replace the query parameters with those of `path` and rerun."""
    params = dict(parse_qsl(urlparse(path).query))
    st.query_params.from_dict(params)
    close_verification()
    st.rerun()


def apply_theme(components: AppComponents):
    theme = components.theme
    accent = SCHEME_COLORS[theme.color_scheme]
    background = "#0f172a" if theme.actual_theme == Theme.DARK else "#ffffff"
    text = "#f8fafc" if theme.actual_theme == Theme.DARK else "#0f172a"
    st.markdown(f"""
    <style>
        .stApp {{ background-color: {background}; color: {text}; }}
        .stButton>button[kind="primary"] {{ background-color: {accent}; border-color: {accent}; }}
        h1, h2, h3 {{ color: {accent}; }}
    </style>
    """, unsafe_allow_html=True)


def main():
    """Main application entry point."""
    components = get_components()
    apply_theme(components)

    params = st.query_params.to_dict()
    view = params.get("view")

    if view == "confirm" or "token_hash" in params or "token" in params:
        render_confirm_page(components, params)
        return

    close_verification()

    if view == "resend":
        render_resend_page(components)
        return

    if view == "debug" and get_settings().app.debug_mode:
        render_debug_page(components)
        return

    session = components.session
    if session.loading:
        st.info("Loading...")
        return

    if not session.is_authenticated:
        render_auth_page(components, verified=params.get("verified") == "true")
        return

    render_signed_in(components)


def render_signed_in(components: AppComponents):
    identity = components.session.identity

    st.sidebar.title("🏪 Storefront")
    st.sidebar.caption(identity.email)
    st.sidebar.markdown("---")

    pages = ["📊 Dashboard", "➕ Add Transaction", "⚙️ Profile & Settings"]
    if get_settings().app.debug_mode:
        pages.append("🐞 Auth Debug")

    page = st.sidebar.radio("Navigate to:", pages, index=0)

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Sign Out"):
        try:
            run_async(components.session.sign_out())
        except AuthError as e:
            st.sidebar.error(e.message)
        except ConfigurationError as e:
            st.sidebar.error(str(e))
        st.rerun()

    if page == "📊 Dashboard":
        render_dashboard_page(components)
    elif page == "➕ Add Transaction":
        render_add_transaction_page(components.transactions, identity.id)
    elif page == "⚙️ Profile & Settings":
        render_profile_page(components, components.profiles, identity.id)
    elif page == "🐞 Auth Debug":
        render_debug_page(components)


# =============================================================================
# AUTH PAGES
# =============================================================================

def render_auth_page(components: AppComponents, verified: bool = False):
    """Sign in / sign up."""
    st.title("🏪 Storefront")
    st.markdown("Track your business income and expenses in seconds.")

    if verified:
        st.success("Email verified! Please sign in to continue.")

    sign_in_tab, sign_up_tab = st.tabs(["Sign In", "Sign Up"])

    with sign_in_tab:
        with st.form("sign_in"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign In", type="primary")

        if submitted:
            try:
                run_async(components.session.sign_in(email, password))
                st.rerun()
            except AuthError as e:
                if is_email_not_confirmed(e):
                    st.warning(
                        "Please check your email and click the verification link "
                        "before signing in."
                    )
                    st.markdown("[Resend verification email](?view=resend)")
                else:
                    st.error(e.message)
            except ConfigurationError as e:
                st.error(f"Sign in is unavailable: {e}")

    with sign_up_tab:
        with st.form("sign_up"):
            full_name = st.text_input("Full Name")
            email = st.text_input("Email", key="sign_up_email")
            password = st.text_input("Password", type="password", key="sign_up_password")
            submitted = st.form_submit_button("Create Account", type="primary")

        if submitted:
            try:
                result = run_async(components.session.sign_up(email, password, full_name))
            except AuthError as e:
                st.error(e.message)
            except ConfigurationError as e:
                st.error(f"Sign up is unavailable: {e}")
            else:
                st.markdown(f"""
                <div class="success-box">
                    <h4>✅ Check your email</h4>
                    <p>{result.message}</p>
                </div>
                """, unsafe_allow_html=True)
                if not result.needs_confirmation:
                    st.rerun()


def render_resend_page(components: AppComponents):
    st.title("📧 Resend Verification Email")

    with st.form("resend"):
        email = st.text_input("Email")
        submitted = st.form_submit_button("Send", type="primary")

    if submitted:
        if not email:
            st.error("Please enter your email address")
        else:
            try:
                run_async(components.session.resend_verification(email))
                st.success(f"If an account exists for {email}, a new verification link is on its way.")
            except AuthError as e:
                st.error(e.message)
            except ConfigurationError as e:
                st.error(str(e))

    if st.button("← Back to sign in"):
        navigate("/")


def close_verification():
    flow = st.session_state.pop("verification_flow", None)
    if flow is not None:
        call_on_loop(flow.close)


def render_confirm_page(components: AppComponents, params: dict):
    """Email verification landing page."""
    st.title("📧 Email Verification")

    targets = st.session_state.setdefault("verification_targets", [])
    flow = st.session_state.get("verification_flow")
    if flow is None:
        targets.clear()
        flow = VerificationFlow(
            components.auth,
            targets.append,
            redirect_delay=get_settings().app.verification_redirect_delay_seconds,
        )
        st.session_state.verification_flow = flow
        with st.spinner("Verifying your email..."):
            run_async(flow.start(params))

    if flow.state == VerificationState.SUCCESS:
        st.markdown(f"""
        <div class="success-box">
            <h4>✅ Email verified</h4>
            <p>{flow.message}</p>
        </div>
        """, unsafe_allow_html=True)
        if st.button("Continue to App", type="primary"):
            call_on_loop(flow.continue_to_app)
            navigate(targets[-1])
        with st.spinner("Redirecting you shortly..."):
            if run_async(flow.wait_for_redirect()):
                navigate(targets[-1])

    elif flow.state == VerificationState.ALREADY_CONFIRMED:
        st.markdown(f"""
        <div class="info-box">
            <h4>ℹ️ Already verified</h4>
            <p>{flow.message}</p>
        </div>
        """, unsafe_allow_html=True)
        if st.button("Continue to Sign In", type="primary"):
            call_on_loop(flow.continue_to_app)
            navigate(targets[-1])

    elif flow.state == VerificationState.ERROR:
        st.markdown(f"""
        <div class="error-box">
            <h4>❌ Verification failed</h4>
            <p>{flow.message}</p>
        </div>
        """, unsafe_allow_html=True)
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Resend Verification Email", type="primary"):
                call_on_loop(flow.resend_verification)
                navigate(targets[-1])
        with col2:
            if st.button("Back to Home"):
                call_on_loop(flow.continue_to_app)
                navigate(targets[-1])


# =============================================================================
# DASHBOARD
# =============================================================================

def render_dashboard_page(components: AppComponents):
    st.title("📊 Dashboard")
    st.markdown("Track your business finances")

    with st.spinner("Loading dashboard..."):
        data = run_async(components.dashboard.load(components.session.identity.id))

    if data.fetch_failed:
        st.warning("We couldn't load your transactions right now. Showing empty totals.")

    stats = data.stats
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Income", f"${stats.total_income:,.2f}")
    col2.metric("Total Expenses", f"${stats.total_expenses:,.2f}")
    col3.metric("Net Profit", f"${stats.net_profit:,.2f}")
    col4.metric("Transactions", stats.transaction_count)

    st.markdown("### Financial Trends")
    if data.chart_failed:
        st.info("Chart data is unavailable right now.")
    else:
        st.caption(f"Last {len(data.chart)} days")
        st.line_chart(
            {
                "Date": [b.label for b in data.chart],
                "Income": [float(b.income) for b in data.chart],
                "Expenses": [float(b.expenses) for b in data.chart],
                "Profit": [float(b.profit) for b in data.chart],
            },
            x="Date",
            y=["Income", "Expenses", "Profit"],
        )

    st.markdown("### Recent Transactions")
    if not data.recent:
        st.info("No transactions yet. Start by adding your first transaction.")
        return

    for t in data.recent:
        sign = "+" if t.type == TransactionType.INCOME else "-"
        css = "income" if t.type == TransactionType.INCOME else "expense"
        tags = t.type.value
        if t.input_method != InputMethod.MANUAL:
            tags += f" · {t.input_method.value}"
        category = f" · {t.category.name}" if t.category else ""
        st.markdown(
            f"**{t.description or 'No description'}** "
            f"<span class='{css}'>{sign}${t.amount:,.2f}</span><br>"
            f"<small>{tags}{category} · {t.transaction_date.isoformat()}</small>",
            unsafe_allow_html=True,
        )


# =============================================================================
# ADD TRANSACTION
# =============================================================================

def render_add_transaction_page(flow: TransactionFlow, user_id: str):
    st.title("➕ Add Transaction")

    method = st.radio(
        "How would you like to add it?",
        ["✍️ Manual Entry", "🎤 Voice Input", "📷 Photo Upload"],
        horizontal=True,
    )

    draft = TransactionDraft()
    receipt = None

    if method == "🎤 Voice Input":
        st.markdown("Say something like *\"sold 3 cakes for 45.50\"* or *\"paid 20 for flour\"*.")
        transcript = st.text_input("What you said")
        if transcript:
            draft = flow.draft_from_voice(transcript)
            st.caption(f"Heard: {transcript}")
    elif method == "📷 Photo Upload":
        uploaded_file = st.file_uploader(
            "Receipt photo",
            type=["jpg", "jpeg", "png", "webp", "heic"],
            help="Take a clear, well-lit photo of the receipt",
        )
        if uploaded_file:
            st.image(uploaded_file, width=300)
            draft = flow.draft_from_photo(uploaded_file.name)
            receipt = (uploaded_file.getvalue(), uploaded_file.name)

    try:
        categories = run_async(flow.list_categories(user_id))
    except (StorageError, ConfigurationError) as e:
        st.warning(f"Couldn't load categories: {e}")
        categories = []

    with st.form("add_transaction"):
        amount = st.text_input("Amount", value=draft.amount, placeholder="0.00")
        type_value = st.selectbox(
            "Type",
            [t.value for t in TransactionType],
            index=[t.value for t in TransactionType].index(draft.type.value),
        )
        category_labels = ["No category"] + [c.name for c in categories]
        category_choice = st.selectbox("Category", category_labels)
        description = st.text_area("Description", value=draft.description)
        submitted = st.form_submit_button("💾 Save Transaction", type="primary")

    if not submitted:
        return

    category_id = None
    if category_choice != "No category":
        category_id = categories[category_labels.index(category_choice) - 1].id

    final = TransactionDraft(
        amount=amount,
        description=description,
        type=TransactionType(type_value),
        category_id=category_id,
        input_method=draft.input_method,
    )

    try:
        with st.spinner("Saving..."):
            saved = run_async(flow.add_transaction(user_id, final, receipt=receipt))
    except FormValidationError as e:
        for message in e.result.error_messages:
            st.error(message)
    except InvalidImageError as e:
        st.error(str(e))
    except (StorageError, ConfigurationError) as e:
        st.error(f"Error: {e}")
    else:
        label = "Income" if saved.type == TransactionType.INCOME else "Expense"
        st.success(f"Transaction added! {label} of ${saved.amount:,.2f} has been recorded.")


# =============================================================================
# PROFILE & SETTINGS
# =============================================================================

def render_profile_page(components: AppComponents, flow: ProfileFlow, user_id: str):
    st.title("⚙️ Profile & Settings")

    profile_tab, categories_tab, appearance_tab = st.tabs(["Profile", "Categories", "Appearance"])

    with profile_tab:
        try:
            profile = run_async(flow.load_profile(user_id))
        except (StorageError, ConfigurationError):
            st.error("Failed to load profile")
            profile = None

        if profile is None:
            st.info("Your profile is being set up. Please check back in a moment.")
        else:
            col1, col2 = st.columns([1, 3])
            with col1:
                if profile.avatar_url:
                    st.image(profile.avatar_url, width=120)
                else:
                    st.markdown(f"## {profile.initials}")
                avatar = st.file_uploader("Change photo", type=["jpg", "jpeg", "png", "webp"])
                if avatar and st.button("Upload photo"):
                    try:
                        run_async(flow.upload_avatar(user_id, avatar.getvalue(), avatar.name))
                        st.success("Profile picture updated successfully")
                    except InvalidImageError as e:
                        st.error(str(e))
                    except (StorageError, ConfigurationError) as e:
                        st.error(f"Error: {e}")

            with col2:
                with st.form("profile"):
                    full_name = st.text_input("Full Name", value=profile.full_name)
                    st.text_input("Email", value=profile.email, disabled=True)
                    currencies = sorted(SUPPORTED_CURRENCIES)
                    currency = st.selectbox(
                        "Currency",
                        currencies,
                        index=currencies.index(profile.currency) if profile.currency in currencies else 0,
                    )
                    language = st.text_input("Language", value=profile.language)
                    submitted = st.form_submit_button("💾 Save Changes", type="primary")

                if submitted:
                    try:
                        update = ProfileUpdate(full_name=full_name, currency=currency, language=language)
                        run_async(flow.update_profile(user_id, update))
                        st.success("Profile updated successfully")
                    except ValueError as e:
                        st.error(f"Invalid profile: {e}")
                    except (StorageError, ConfigurationError) as e:
                        st.error(f"Error: {e}")

    with categories_tab:
        render_categories(flow, user_id)

    with appearance_tab:
        theme = components.theme
        themes = [t.value for t in Theme]
        chosen = st.radio("Theme", themes, index=themes.index(theme.theme.value), horizontal=True)
        schemes = [c.value for c in ColorScheme]
        scheme = st.selectbox("Color scheme", schemes, index=schemes.index(theme.color_scheme.value))
        if chosen != theme.theme.value or scheme != theme.color_scheme.value:
            theme.set_theme(Theme(chosen))
            theme.set_color_scheme(ColorScheme(scheme))
            st.rerun()


def render_categories(flow: ProfileFlow, user_id: str):
    try:
        categories = run_async(flow.list_categories(user_id))
    except (StorageError, ConfigurationError):
        st.error("Failed to load categories")
        categories = []

    for category in categories:
        col1, col2, col3 = st.columns([4, 2, 1])
        col1.markdown(
            f"<span style='color:{category.color}'>●</span> {category.name}",
            unsafe_allow_html=True,
        )
        col2.caption(category.type.value)
        if col3.button("🗑️", key=f"delete_{category.id}"):
            try:
                run_async(flow.delete_category(user_id, category.id))
            except (StorageError, ConfigurationError) as e:
                st.error(f"Error: {e}")
            st.rerun()

    st.markdown("---")
    with st.form("add_category"):
        name = st.text_input("New category")
        category_type = st.selectbox("Type", [t.value for t in TransactionType], key="category_type")
        color = st.color_picker("Color", value="#3B82F6")
        submitted = st.form_submit_button("➕ Add Category")

    if submitted:
        try:
            draft = CategoryDraft(name=name, type=TransactionType(category_type), color=color)
            run_async(flow.add_category(user_id, draft))
            st.success("Category added")
            st.rerun()
        except FormValidationError as e:
            for message in e.result.error_messages:
                st.error(message)
        except ValueError as e:
            st.error(f"Invalid category: {e}")
        except (StorageError, ConfigurationError) as e:
            st.error(f"Error: {e}")


# =============================================================================
# AUTH DEBUG
# =============================================================================

def render_debug_page(components: AppComponents):
    st.title("🐞 Auth Debug")

    if "diagnostics" not in st.session_state:
        st.session_state.diagnostics = AuthDiagnostics(components.auth, origin=get_origin())
    diagnostics: AuthDiagnostics = st.session_state.diagnostics

    st.markdown("### Configuration")
    snapshot = diagnostics.load_configuration()
    st.json(snapshot.model_dump(mode="json"))
    for issue in snapshot.issues:
        st.error(issue)

    status = validate_all_settings()
    for key in ["supabase", "site", "app", "cloudinary"]:
        if key not in status:
            continue
        if status[key]:
            st.success(f"✅ {key} - OK")
        else:
            st.error(f"❌ {key} - {status.get(f'{key}_error', 'Not configured')}")

    with st.expander("Environment"):
        st.json(get_environment_info(get_origin()))

    st.markdown("### Current Session")
    st.json(run_async(diagnostics.check_session()).model_dump())

    st.markdown("### Tests")
    email = st.text_input("Test email", value=DEFAULT_TEST_EMAIL)
    col1, col2, col3, col4 = st.columns(4)
    if col1.button("Test Email Verification"):
        run_async(diagnostics.test_email_verification(email))
    if col2.button("Test Direct Verification"):
        run_async(diagnostics.test_direct_verification(st.query_params.to_dict()))
    if col3.button("Test Sign In"):
        run_async(diagnostics.test_auth_flow(email))
    if col4.button("Clear Results"):
        diagnostics.clear_results()

    icons = {
        DiagnosticStatus.SUCCESS: "✅",
        DiagnosticStatus.WARNING: "⚠️",
        DiagnosticStatus.ERROR: "❌",
    }
    for result in diagnostics.results:
        st.markdown(f"{icons[result.status]} **{result.test}**: {result.message}")
        st.caption(result.timestamp.isoformat())
        if result.details:
            st.json(result.details)


if __name__ == "__main__":
    main()
