"""
Fixed constants for SplitSpree - settlement tolerances and receipt text patterns
"""

from decimal import Decimal

# Settlement tolerances
SETTLEMENT_EPSILON = Decimal("0.01")
MATERIALITY_THRESHOLD = Decimal("0.005")
DECIMAL_QUANTIZE = Decimal("0.01")

ZERO = Decimal("0")

# Amount lines at the bottom of a receipt
SUBTOTAL_PATTERNS = [
    r'\b(?:SUB\s*-?\s*TOTAL|ПОДСУМА|МЕЖДИННА\s+СУМА)[:\s]*\$?([\d,\.]+)',
]

TAX_PATTERNS = [
    r'\b(?:SALES\s+TAX|TAX|HST|GST|VAT|ДДС)(?:\s*\d+(?:[\.,]\d+)?\s*%)?[:\s]*\$?([\d,\.]+)',
]

TIP_PATTERNS = [
    r'\b(?:TIP|GRATUITY|SERVICE\s+CHARGE|БАКШИШ)[:\s]*\$?([\d,\.]+)',
]

TOTAL_SUM_PATTERNS = [
    r'\b(?:GRAND\s+TOTAL|TOTAL|ОБЩA?\s+СУМА|ОБЩО|Всичко|AMOUNT\s+DUE|BALANCE\s+DUE)[:\s]*\$?([\d,\.]+)',
]

DATE_PATTERNS = [
    r'\b(\d{4}-\d{2}-\d{2})\b',
    r'\b(\d{1,2}[/\.\-]\d{1,2}[/\.\-]\d{2,4})\b',
    r'\b((?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?\s+\d{1,2},?\s+\d{4})\b',
]

# Keywords that mark a line as a summary / footer line rather than an item
SUMMARY_KEYWORDS = [
    'SUBTOTAL', 'SUB TOTAL', 'SUB-TOTAL', 'TOTAL', 'TAX', 'HST', 'GST', 'VAT',
    'TIP', 'GRATUITY', 'SERVICE CHARGE', 'AMOUNT DUE', 'BALANCE DUE',
    'СУМА', 'ОБЩО', 'ДДС', 'СМЕТКА', 'БАКШИШ',
]

# Words to skip
SKIP_WORDS = [
    'сума', 'total', 'бон', 'ддс', 'унп', 'еик', 'карта', 'сметка',
    'благодарим', 'tax', 'subtotal', 'cash', 'change', 'card',
    'receipt', 'invoice', 'date', 'time', 'cashier', 'thank',
    'чек', 'каса', 'visa', 'mastercard', 'debit', 'tip', 'gratuity',
    'balance', 'amount due', 'tel', 'phone',
]
