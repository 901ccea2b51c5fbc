"""
CLI Interface module for SplitSpree
Command-line interface for receipt processing and bill splitting
"""

import json
import os
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from balance_calculator import compute_balances, summarize_users
from command_interpreter import CommandInterpretationError, parse_chat_response, serialize_context
from commands import (
    AddReceipt,
    AddUser,
    AssignAllItems,
    Command,
    SetItemAssignees,
    SetItemPrice,
    SetReceiptPayer,
)
from config import EXPORT_DIRECTORY
from constants import DECIMAL_QUANTIZE
from data_models import AppState, Item, ReceiptExtraction, User, validate_state
from debt_settlement import settle
from log_setup import get_logger
from receipt_extraction import OCRReceiptExtractor, ReceiptExtractionError, load_extraction
from state_store import StateStore, new_id
from utils import (
    clean_text_for_display,
    ensure_directory_exists,
    parse_selection,
    try_parse_decimal,
    validate_image_path,
    validate_menu_choice,
)

logger = get_logger(__name__)

EXPORT_VERSION = '1.0'


def money(amount: Decimal) -> float:
    return float(amount.quantize(DECIMAL_QUANTIZE))


def user_name(state: AppState, user_id: Optional[str]) -> str:
    user = state.find_user(user_id) if user_id else None
    return user.name if user else 'Nobody'


def build_export_data(state: AppState) -> Dict[str, Any]:
    """Complete session snapshot with balances, breakdown and payment instructions"""
    balances = compute_balances(state)
    settlements = settle(balances)
    items = list(state.items.values())

    receipts = []
    for receipt in state.receipts.values():
        receipts.append({
            'id': receipt.id,
            'store_name': receipt.store_name,
            'date': receipt.date,
            'payer': user_name(state, receipt.payer_id),
            'payer_id': receipt.payer_id,
            'subtotal': money(receipt.subtotal),
            'tax': money(receipt.tax),
            'tip': money(receipt.tip),
            'total': money(receipt.total),
            'items': [
                {
                    'id': item.id,
                    'name': item.name,
                    'description': item.description,
                    'price': money(item.price),
                    'user_ids': list(item.user_ids),
                }
                for item in state.receipt_items(receipt.id)
            ],
        })

    breakdown = {}
    for summary in summarize_users(state):
        breakdown[summary.user.id] = {
            'name': summary.user.name,
            'subtotal': money(summary.subtotal),
            'tax_share': money(summary.tax),
            'tip_share': money(summary.tip),
            'total_owed': money(summary.owed),
            'total_paid': money(summary.paid),
            'balance': money(summary.balance),
            'status': summary.status,
        }

    payment_instructions = [
        {
            'instruction': f"{user_name(state, t.from_user_id)} pays {user_name(state, t.to_user_id)} {money(t.amount):.2f}",
            'from': t.from_user_id,
            'to': t.to_user_id,
            'amount': money(t.amount),
        }
        for t in settlements
    ]

    return {
        'export_info': {
            'timestamp': datetime.now().isoformat(),
            'version': EXPORT_VERSION,
        },
        'users': [{'id': user.id, 'name': user.name} for user in state.users],
        'receipts': receipts,
        'settlement_analysis': {
            'balances': {user_id: money(amount) for user_id, amount in balances.items()},
            'detailed_breakdown': breakdown,
            'payment_instructions': payment_instructions,
            'transactions_needed': len(settlements),
            'summary': {
                'people_count': len(state.users),
                'receipts_count': len(state.receipts),
                'items_count': len(items),
                'assigned_items': len([item for item in items if item.is_assigned]),
                'unassigned_items': len([item for item in items if not item.is_assigned]),
            },
        },
        'consistency_problems': validate_state(state),
    }


class SplitSpreeCLI:
    """Command-line interface for SplitSpree"""

    def __init__(self, store: Optional[StateStore] = None, extractor: Optional[OCRReceiptExtractor] = None):
        self.store = store or StateStore()
        self._extractor = extractor

    @property
    def state(self) -> AppState:
        return self.store.state

    @property
    def extractor(self) -> OCRReceiptExtractor:
        # Created on first use; needs a Tesseract install
        if self._extractor is None:
            self._extractor = OCRReceiptExtractor()
        return self._extractor

    def dispatch(self, command: Command) -> bool:
        """Apply a command; False when the store ignored it"""
        before = self.state
        return self.store.dispatch(command) is not before

    def display_banner(self):
        print("\n" + "="*60)
        print("🧾  SPLITSPREE - Bill Splitter")
        print("Receipts, item assignment & settlements")
        print("="*60)

    def all_items(self) -> List[Item]:
        """Items across receipts, in receipt line order"""
        items = []
        for receipt in self.state.receipts.values():
            items.extend(self.state.receipt_items(receipt.id))
        return items

    def choose_user(self, prompt: str, allow_none: bool = False) -> Optional[str]:
        users = self.state.users
        for i, user in enumerate(users, 1):
            print(f"{i}. {user.name}")
        if allow_none:
            print("0. Nobody")
        choice = input(prompt).strip()
        if allow_none and choice == '0':
            return None
        selection = parse_selection(choice, len(users))
        if not selection or len(selection) != 1:
            print("Invalid selection")
            return None
        return users[selection[0]].id

    def add_receipt(self, extraction: ReceiptExtraction):
        """Review an extraction, pick the payer and add it"""
        print(f"\n🏪 {extraction.store_name or 'Unknown store'}  {extraction.date}")
        for i, line in enumerate(extraction.items, 1):
            print(f"{i:2}. {clean_text_for_display(line.description, 40):40} {line.price:8.2f}")
        print("-"*50)
        print(f"{'SUBTOTAL:':40} {extraction.subtotal:8.2f}")
        print(f"{'TAX:':40} {extraction.tax:8.2f}")
        print(f"{'TIP:':40} {extraction.tip:8.2f}")
        print(f"{'TOTAL:':40} {extraction.total:8.2f}")

        payer_id = None
        if self.state.users:
            print("\nWho paid this receipt?")
            payer_id = self.choose_user("Payer number: ", allow_none=True)

        if self.dispatch(AddReceipt(extraction=extraction, payer_id=payer_id)):
            print(f"✓ Added receipt with {len(extraction.items)} items, paid by {user_name(self.state, payer_id)}")
        else:
            print("⚠ Receipt rejected: amounts must not be negative")

    def process_receipt_image(self, image_path: str):
        print(f"\n📸 Processing receipt: {image_path}")
        try:
            extraction = self.extractor.extract(image_path)
        except ReceiptExtractionError as e:
            print(f"⚠ {e}")
            return
        m = self.extractor.processor.metrics
        print(f"⚡ OCR took {m.processing_time:.2f}s on {m.workers_used} workers, {m.items_detected} items detected")
        self.add_receipt(extraction)

    def load_receipt_file(self, path: str):
        try:
            extraction = load_extraction(path)
        except (OSError, ReceiptExtractionError) as e:
            print(f"⚠ Could not load {path}: {e}")
            return
        self.add_receipt(extraction)

    def manage_people(self):
        """Add people to the group"""
        print("\n" + "="*50)
        print("👥 PEOPLE")
        print("="*50)

        while True:
            names = ', '.join(user.name for user in self.state.users) or 'None'
            print(f"\nCurrent people: {names}")
            print("\n1. Add person")
            print("2. Quick add (Person 1-4)")
            print("3. Done")

            choice = validate_menu_choice(input("\nChoice: "), ['1', '2', '3']) or ''
            print("-"*50)

            if choice == '1':
                name = input("Enter name: ").strip()
                if not name:
                    continue
                if any(user.name == name for user in self.state.users):
                    print(f"⚠ {name} is already in the group")
                    continue
                self.dispatch(AddUser(User(id=new_id("user"), name=name)))
                print(f"✓ Added {name}")
            elif choice == '2':
                existing = {user.name for user in self.state.users}
                for i in range(1, 5):
                    name = f"Person {i}"
                    if name not in existing:
                        self.dispatch(AddUser(User(id=new_id("user"), name=name)))
                print("✓ Added Person 1-4")
            elif choice == '3':
                break

    def assign_items(self):
        """Walk through items and assign them to people"""
        items = self.all_items()
        if not items:
            print("\n⚠ No receipt items to assign")
            return
        if not self.state.users:
            print("\n⚠ No people added yet")
            return

        print("\n" + "="*50)
        print("🔍 ITEM ASSIGNMENT")
        print("="*50)
        print("\n1. Go through each item")
        print("2. Assign every item to everyone")
        if validate_menu_choice(input("Choice: "), ['1', '2']) == '2':
            self.dispatch(AssignAllItems(tuple(self.state.user_ids())))
            print("✓ Every item assigned to everyone")
            return

        users = self.state.users
        for item in items:
            current = self.state.items[item.id]
            assigned = ', '.join(user_name(self.state, uid) for uid in current.user_ids) or 'None'
            print(f"\n{current.description} - {current.price:.2f}")
            print(f"Assigned to: {assigned}")
            print("\n1. Assign to everyone")
            print("2. Assign to specific people")
            print("3. Unassign")
            print("4. Skip")

            choice = validate_menu_choice(input("Choice: "), ['1', '2', '3', '4']) or ''
            print("-"*50)

            if choice == '1':
                self.dispatch(SetItemAssignees(item.id, tuple(user.id for user in users)))
                print("✓ Assigned to everyone")
            elif choice == '2':
                for i, user in enumerate(users, 1):
                    print(f"{i}. {user.name}")
                selection = parse_selection(input("Enter person numbers (comma-separated): "), len(users))
                if selection is None:
                    print("Invalid selection")
                    continue
                self.dispatch(SetItemAssignees(item.id, tuple(users[i].id for i in selection)))
                names = ', '.join(users[i].name for i in selection)
                print(f"✓ Assigned to {names}")
            elif choice == '3':
                self.dispatch(SetItemAssignees(item.id, ()))
                print("✓ Unassigned")

    def edit_item_price(self):
        items = self.all_items()
        if not items:
            print("\n⚠ No receipt items")
            return
        for i, item in enumerate(items, 1):
            print(f"{i:2}. {clean_text_for_display(item.description, 40):40} {item.price:8.2f}")
        selection = parse_selection(input("Item number: "), len(items))
        if not selection or len(selection) != 1:
            print("Invalid selection")
            return
        price = try_parse_decimal(input("New price: "))
        if price is None or price < 0:
            print("Invalid amount")
            return
        item = items[selection[0]]
        self.dispatch(SetItemPrice(item.id, price))
        print(f"✓ {item.name} now costs {price:.2f}")

    def set_payer(self):
        receipts = list(self.state.receipts.values())
        if not receipts or not self.state.users:
            print("\n⚠ Need receipts and people to set a payer")
            return
        for i, receipt in enumerate(receipts, 1):
            print(f"{i}. {receipt.store_name or 'Receipt'} {receipt.date} {receipt.total:.2f} - paid by {user_name(self.state, receipt.payer_id)}")
        selection = parse_selection(input("Receipt number: "), len(receipts))
        if not selection or len(selection) != 1:
            print("Invalid selection")
            return
        payer_id = self.choose_user("Payer number: ", allow_none=True)
        self.dispatch(SetReceiptPayer(receipts[selection[0]].id, payer_id))
        print(f"✓ Paid by {user_name(self.state, payer_id)}")

    def apply_assistant_reply(self, reply: Any) -> bool:
        """Show an assistant reply and apply its action once confirmed"""
        try:
            response = parse_chat_response(reply)
        except CommandInterpretationError as e:
            print(f"⚠ Could not understand the assistant reply: {e}")
            return False

        print(f"\n🤖 {response.response_text}")
        if not response.needs_confirmation:
            return False

        answer = input("Apply this change? [y/N]: ").strip().lower()
        if answer not in ('y', 'yes'):
            print("Cancelled")
            return False

        if self.dispatch(response.action):
            print("✓ Done")
            return True
        print("⚠ Nothing changed: the action refers to unknown items or people")
        return False

    def assistant(self):
        """Exchange files with the chat assistant"""
        users_json, items_json = serialize_context(self.state)
        print("\nContext for the assistant:")
        print(f"users: {users_json}")
        print(f"items: {items_json}")
        path = input("\nPath to the assistant reply (JSON): ").strip()
        if not path:
            return
        try:
            with open(path, encoding='utf-8') as f:
                reply = f.read()
        except OSError as e:
            print(f"⚠ Could not read {path}: {e}")
            return
        self.apply_assistant_reply(reply)

    def show_summary(self):
        """Display per-person breakdown and settlements"""
        if not self.state.users:
            print("\n⚠ No people added yet")
            return

        unassigned = [item for item in self.state.items.values() if not item.is_assigned]
        if unassigned:
            print(f"\n⚠ {len(unassigned)} items are unassigned and not counted in anyone's share")

        print("\n" + "="*50)
        print("💰 INDIVIDUAL SHARES")
        print("="*50)
        for summary in summarize_users(self.state):
            label = 'Final Credit' if summary.balance >= 0 else 'Amount Due'
            print(f"\n{summary.user.name}")
            print(f"  Subtotal {summary.subtotal:9.2f}   Tax {summary.tax:7.2f}   Tip {summary.tip:7.2f}")
            print(f"  Owes     {summary.owed:9.2f}   Paid {summary.paid:9.2f}")
            print(f"  {label}: {abs(summary.balance):.2f}")

        settlements = settle(compute_balances(self.state))

        print("\n" + "="*50)
        print("💸 SETTLEMENTS")
        print("="*50)
        if not settlements:
            print("\n🎉 Everyone is settled up - no payments needed!")
        for t in settlements:
            print(f"{user_name(self.state, t.from_user_id):15} → {user_name(self.state, t.to_user_id):15} : {t.amount:8.2f}")
        print(f"\nTransactions: {len(settlements)}")

    def export_results(self) -> Optional[str]:
        """Export the session to a JSON file"""
        if not self.state.receipts and not self.state.users:
            print("\n⚠ Nothing to export")
            return None
        if not ensure_directory_exists(EXPORT_DIRECTORY):
            print("\n⚠ Export directory is not writable")
            return None

        filename = os.path.join(EXPORT_DIRECTORY, f"splitspree_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json")
        data = build_export_data(self.state)
        try:
            with open(filename, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error("Export to %s failed: %s", filename, e)
            print(f"\nExport failed: {e}")
            return None

        print(f"\n✅ Session exported to {filename}")
        return filename

    def run(self):
        """Run the CLI application"""
        self.display_banner()

        actions = {
            '1': self._prompt_image,
            '2': lambda: self.load_receipt_file(input("Enter JSON path: ").strip()),
            '3': self.manage_people,
            '4': self.assign_items,
            '5': self.edit_item_price,
            '6': self.set_payer,
            '7': self.assistant,
            '8': self.show_summary,
            '9': self.export_results,
        }

        while True:
            print("\n" + "="*50)
            print("MAIN MENU")
            print("="*50)
            print("1. Process receipt image")
            print("2. Load receipt JSON")
            print("3. Manage people")
            print("4. Assign items to people")
            print("5. Correct an item price")
            print("6. Change who paid a receipt")
            print("7. Apply assistant reply")
            print("8. Show balances and settlements")
            print("9. Export results")
            print("0. Exit")

            choice = input("\nChoice: ").strip()
            if choice == '0':
                print("\n👋 Thank you for using SplitSpree!")
                break
            action = actions.get(choice)
            if action:
                action()

    def _prompt_image(self):
        image_path = input("Enter image path: ").strip()
        if validate_image_path(image_path):
            self.process_receipt_image(image_path)
        else:
            print("⚠ Invalid or unsupported image")
