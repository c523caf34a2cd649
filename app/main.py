"""
Streamlit Frontend for Party Splitter

The screen friends use to plan a party and split its costs.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Balances and settlements recomputed on every render, never cached
3. Clear error messages; storage errors can simply be retried
4. Amounts rounded only when displayed

Layout:
- Sidebar: party list, new party form, storage status
- Party page: Expenses / Tasks / Friends tabs, Balance Summary next to expenses
"""

import asyncio
from datetime import date
from decimal import Decimal

import streamlit as st

from src.config import get_settings, validate_all_settings
from src.models.party import (
    Expense,
    Party,
    SplitMethod,
    build_split,
    split_values,
)
from src.orchestrator import (
    InvalidExpenseError,
    InvalidInputError,
    PartyFlow,
    create_app_components,
)
from src.services.storage import StorageError


# Page configuration
st.set_page_config(
    page_title="Party Splitter",
    page_icon="🎉",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .debt-line {
        padding: 10px;
        background-color: #f1f3f5;
        border-radius: 6px;
        margin: 6px 0;
    }
    .debt-from { color: #dc3545; font-weight: bold; }
    .debt-to { color: #28a745; font-weight: bold; }
    .settled {
        padding: 16px;
        text-align: center;
        font-weight: bold;
        color: #28a745;
    }
</style>
""", unsafe_allow_html=True)


SPLIT_LABELS = {
    SplitMethod.EQUAL: "Equally",
    SplitMethod.BY_AMOUNT: "By exact amount",
    SplitMethod.BY_PERCENTAGE: "By percentage",
    SplitMethod.BY_SHARES: "By shares",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_flow() -> PartyFlow:
    """Get or create the party flow (cached)."""
    return create_app_components()


def money(amount) -> str:
    symbol = get_settings().app.currency_symbol
    return f"{symbol}{Decimal(amount):,.2f}"


def call(coro, success: str = None) -> bool:
    """
    Run a flow call, showing validation and storage errors in the page.

    Returns True if the call succeeded.
    """
    try:
        run_async(coro)
    except InvalidInputError as e:
        for message in e.result.error_messages:
            st.error(message)
        return False
    except StorageError as e:
        st.error(f"Couldn't save your change: {e}. Please try again.")
        return False
    except ValueError as e:
        st.error(str(e))
        return False

    if success:
        st.toast(success)
    return True


def main():
    """Main application entry point."""
    flow = get_flow()

    st.sidebar.title("🎉 Party Splitter")
    st.sidebar.markdown("---")

    try:
        parties = run_async(flow.list_parties())
    except StorageError as e:
        st.error(f"Couldn't load parties: {e}")
        if st.button("🔄 Retry"):
            st.rerun()
        st.stop()

    party = render_sidebar(flow, parties)

    if party is None:
        render_home(parties)
    else:
        render_party_page(flow, party)


def render_sidebar(flow: PartyFlow, parties: list[Party]):
    """Party picker and new party form. Returns the selected party."""
    selected = None

    if parties:
        selected = st.sidebar.radio(
            "Your parties:",
            options=[None] + parties,
            format_func=lambda p: "🏠 Home" if p is None else f"{p.name} ({p.date:%d %b %Y})",
        )

    st.sidebar.markdown("---")
    with st.sidebar.form("new_party", clear_on_submit=True):
        st.markdown("**New party**")
        name = st.text_input("Name", placeholder="e.g., Beach weekend")
        party_date = st.date_input("Date", value=date.today())
        if st.form_submit_button("➕ Create Party"):
            if call(flow.create_party(name, party_date), success="Party created"):
                st.rerun()

    st.sidebar.markdown("---")
    with st.sidebar.expander("⚙️ Storage status"):
        status = validate_all_settings()
        backend = get_settings().storage.backend
        st.markdown(f"**Backend:** {backend.replace('_', ' ').title()}")
        for key in ("storage", "google_sheets", "app"):
            if key not in status:
                continue
            if status[key]:
                st.success(f"✅ {key.replace('_', ' ').title()}")
            else:
                st.error(f"❌ {key.replace('_', ' ').title()} - {status.get(f'{key}_error')}")

    return selected


def render_home(parties: list[Party]):
    st.title("🎉 Your Parties")
    if not parties:
        st.info("No parties yet. Create one from the sidebar to get started.")
        return

    for p in parties:
        st.markdown(
            f"**{p.name}** · {p.date:%d %B %Y} · "
            f"{len(p.members)} friends · {len(p.expenses)} expenses"
        )


def render_party_page(flow: PartyFlow, party: Party):
    col1, col2 = st.columns([4, 1])
    with col1:
        st.title(party.name)
        st.caption(party.date.strftime("%d %B %Y"))
    with col2:
        if st.button("🗑️ Delete Party"):
            if call(flow.delete_party(party.id), success="Party deleted"):
                st.rerun()

    expenses_tab, tasks_tab, friends_tab = st.tabs(["Expenses", "Tasks", "Friends"])

    with expenses_tab:
        render_expenses_tab(flow, party)
    with tasks_tab:
        render_tasks_tab(flow, party)
    with friends_tab:
        render_friends_tab(flow, party)


# =============================================================================
# EXPENSES
# =============================================================================

def render_expenses_tab(flow: PartyFlow, party: Party):
    left, right = st.columns([2, 1])

    with left:
        st.subheader("Expenses")
        if not party.members:
            st.info("Add friends before adding expenses.")
        else:
            with st.expander("➕ Add Expense"):
                render_expense_form(flow, party, None)

        if not party.expenses:
            st.markdown("*No expenses added yet.*")

        for expense in sorted(party.expenses, key=lambda e: e.date, reverse=True):
            c1, c2 = st.columns([3, 1])
            with c1:
                st.markdown(f"**{expense.description}**")
                st.caption(
                    f"Paid by {party.member_name(expense.paid_by)} on "
                    f"{expense.date:%d %b %Y} · {SPLIT_LABELS[expense.split_method]}"
                )
            with c2:
                st.markdown(f"### {money(expense.amount)}")

            with st.expander("✏️ Edit"):
                render_expense_form(flow, party, expense)
                if st.button("🗑️ Delete Expense", key=f"del_{expense.id}"):
                    if call(flow.remove_expense(party.id, expense.id), success="Expense deleted"):
                        st.rerun()

    with right:
        st.subheader("Balance Summary")
        render_balance_summary(flow, party)


def render_expense_form(flow: PartyFlow, party: Party, expense: Expense = None):
    """Add form when `expense` is None, edit form otherwise."""
    key = expense.id if expense else "new"
    member_ids = [m.id for m in party.members]
    names = {m.id: m.name for m in party.members}

    description = st.text_input(
        "Description",
        value=expense.description if expense else "",
        key=f"desc_{key}",
    )
    amount = st.number_input(
        f"Amount ({get_settings().app.currency_symbol})",
        value=float(expense.amount) if expense else 0.0,
        min_value=0.0,
        step=0.01,
        format="%.2f",
        key=f"amount_{key}",
    )

    c1, c2 = st.columns(2)
    with c1:
        payer_options = member_ids
        if expense and expense.paid_by not in payer_options:
            payer_options = [expense.paid_by] + member_ids
        paid_by = st.selectbox(
            "Paid by",
            options=payer_options,
            index=payer_options.index(expense.paid_by) if expense else 0,
            format_func=lambda m: names.get(m, "Unknown"),
            key=f"payer_{key}",
        )
    with c2:
        expense_date = st.date_input(
            "Date",
            value=expense.date if expense else date.today(),
            key=f"date_{key}",
        )

    participants = st.multiselect(
        "Split between",
        options=member_ids,
        default=[m for m in (expense.participant_ids if expense else member_ids) if m in names],
        format_func=lambda m: names.get(m, "Unknown"),
        key=f"split_between_{key}",
    )

    methods = list(SplitMethod)
    method = st.selectbox(
        "Split method",
        options=methods,
        index=methods.index(expense.split_method) if expense else 0,
        format_func=lambda m: SPLIT_LABELS[m],
        key=f"method_{key}",
    )

    previous = split_values(expense.split) if expense and expense.split_method == method else {}
    values = {}
    if method != SplitMethod.EQUAL:
        for member_id in participants:
            if method == SplitMethod.BY_SHARES:
                values[member_id] = st.number_input(
                    names.get(member_id, "Unknown"),
                    value=int(previous.get(member_id, 1)),
                    min_value=0,
                    step=1,
                    key=f"value_{key}_{member_id}",
                )
            else:
                values[member_id] = st.number_input(
                    names.get(member_id, "Unknown"),
                    value=float(previous.get(member_id, 0.0)),
                    min_value=0.0,
                    max_value=100.0 if method == SplitMethod.BY_PERCENTAGE else None,
                    step=0.01,
                    key=f"value_{key}_{member_id}",
                )

    label = "💾 Save Changes" if expense else "➕ Add Expense"
    if not st.button(label, key=f"save_{key}", type="primary"):
        return

    if not description or amount <= 0 or not participants:
        st.error("Please fill all required fields with valid values.")
        return

    try:
        split = build_split(method, participants, values)
        if expense:
            updated = Expense(
                id=expense.id,
                description=description,
                amount=Decimal(str(amount)),
                paid_by=paid_by,
                date=expense_date,
                split=split,
            )
            run_async(flow.update_expense(party.id, updated))
        else:
            run_async(flow.add_expense(
                party.id,
                description=description,
                amount=Decimal(str(amount)),
                paid_by=paid_by,
                expense_date=expense_date,
                split=split,
            ))
    except InvalidExpenseError as e:
        st.warning(flow.describe_validation(e.result))
        return
    except StorageError as e:
        st.error(f"Couldn't save the expense: {e}. Please try again.")
        return
    except ValueError as e:
        st.error(str(e))
        return

    st.rerun()


def render_balance_summary(flow: PartyFlow, party: Party):
    if not party.members:
        st.markdown("*Add friends to see balances.*")
        return
    if not party.expenses:
        st.markdown("*Add an expense to start splitting.*")
        return

    ledger = flow.ledger_for(party)

    if not ledger.settlements:
        st.markdown('<div class="settled">All settled up!</div>', unsafe_allow_html=True)
    else:
        for debt in ledger.settlements:
            st.markdown(
                f'<div class="debt-line"><span class="debt-from">{debt.from_name}</span> owes '
                f'<span class="debt-to">{debt.to_name}</span> <b>{money(debt.amount)}</b></div>',
                unsafe_allow_html=True,
            )

    with st.expander("📊 Totals"):
        st.table([
            {"Friend": b.name, "Balance": money(b.amount)}
            for b in ledger.balances
        ])


# =============================================================================
# TASKS
# =============================================================================

def render_tasks_tab(flow: PartyFlow, party: Party):
    st.subheader("Tasks")
    names = {m.id: m.name for m in party.members}

    with st.form("new_task", clear_on_submit=True):
        description = st.text_input("Task", placeholder="e.g., Bring snacks")
        c1, c2 = st.columns(2)
        with c1:
            assigned_to = st.selectbox(
                "Assign to",
                options=[None] + list(names),
                format_func=lambda m: "Unassigned" if m is None else names[m],
            )
        with c2:
            deadline = st.date_input("Deadline", value=None)
        if st.form_submit_button("➕ Add Task"):
            if not description:
                st.error("Please describe the task.")
            elif call(flow.add_task(party.id, description, assigned_to, deadline), success="Task added"):
                st.rerun()

    if not party.tasks:
        st.markdown("*No tasks yet.*")

    for task in party.tasks:
        c1, c2, c3 = st.columns([1, 6, 1])
        with c1:
            done = st.checkbox("Done", value=task.completed, key=f"task_{task.id}", label_visibility="collapsed")
            if done != task.completed:
                if call(flow.toggle_task(party.id, task.id)):
                    st.rerun()
        with c2:
            text = f"~~{task.description}~~" if task.completed else task.description
            details = [party.member_name(task.assigned_to, default="Unassigned")]
            if task.deadline:
                details.append(f"due {task.deadline:%d %b %Y}")
            st.markdown(f"{text}  \n*{' · '.join(details)}*")
        with c3:
            if st.button("🗑️", key=f"del_task_{task.id}"):
                if call(flow.remove_task(party.id, task.id), success="Task deleted"):
                    st.rerun()


# =============================================================================
# FRIENDS
# =============================================================================

def render_friends_tab(flow: PartyFlow, party: Party):
    st.subheader("Friends")

    with st.form("new_friend", clear_on_submit=True):
        name = st.text_input("Name", placeholder="e.g., Alice")
        if st.form_submit_button("➕ Add Friend"):
            if call(flow.add_member(party.id, name), success="Friend added"):
                st.rerun()

    if not party.members:
        st.markdown("*No friends added yet.*")

    for member in party.members:
        c1, c2 = st.columns([6, 1])
        with c1:
            st.markdown(f"👤 {member.name}")
        with c2:
            if st.button("🗑️", key=f"del_member_{member.id}"):
                if call(flow.remove_member(party.id, member.id), success="Friend removed"):
                    st.rerun()


if __name__ == "__main__":
    main()
