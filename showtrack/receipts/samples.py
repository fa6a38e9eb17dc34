"""Sample receipt text for demo mode and local testing."""

# A feed store receipt as printed, with the payment card lines removed
DEMO_RECEIPT_TEXT = """\
STRUTTY'S
Feed and Pet Supply

23630 I.H. 10 West
Boerne, TX 78006
(830) 981-2258

Invoice: 526850
Drawer: 01
Employee: TREY           Date: 09/08/2024
                         Time: 03:10:13 PM
Credit Card: Debit Purchase

Qty  Description         Price   Extended
Num  Disc.
2    JACOBY'S RED TAG GROW/DEV
                         $28.50   $57.00
H    EA      FENCE FEEDER 16" - BLACK
                         $17.79   $17.79
1    SCOOP,ENCLOSED 3QT HOT PINK
H    EA                  $5.29    $5.29

                         Subtotal: $80.08
                         Tax (8.250%): $1.50

                         Total: $81.98

Tendered:                $0.00
Change:                  $0.00

Thank You-We appreciate your Business!
14 Day Return Policy on items with proof
of purchase with the exception of Feed &
Hay with Management approval only

Trans Id: 6609NDS (No.109)
Approval Code: 797012
"""
