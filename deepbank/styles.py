"""CSS styles for the DeepBank Terminal application."""

CSS = """
Screen {
    background: #1e1e2e;
}

Header {
    background: #181825;
    text-style: bold;
    padding: 0 1;
    height: 3;
}

#account-status {
    background: #181825;
    color: #a6adc8;
    padding: 0 2;
    height: 1;
    text-align: right;
    dock: top;
}

#loading-overlay {
    background: #181825;
    color: #fbbf24;
    padding: 0 2;
    height: 1;
    dock: bottom;
}

#timeout-banner {
    background: #7f1d1d;
    color: #fecaca;
    padding: 0 2;
    height: 1;
    dock: top;
}

Footer {
    background: #181825;
    height: 2;
}

Tabs {
    background: #181825;
    height: 3;
}

Tab {
    background: #1e1e2e;
    text-style: bold;
    padding: 0 1;
    min-height: 1;
}

Tab.active {
    background: #22d3ee;
    color: #0f172a;
    text-style: bold reverse;
}

DataTable {
    background: #1e1e2e;
    border: solid #3b82f6;
    min-height: 6;
}

Button {
    background: transparent;
    color: #3b82f6;
    border: none;
    height: 3;
    min-height: 3;
    min-width: 16;
    padding: 0 1;
    margin: 0;
    content-align: center middle;
}

Button:hover {
    background: #3b82f6;
    color: #ffffff;
    text-style: underline;
}

Button:focus {
    background: #3b82f6;
    color: #ffffff;
    text-style: bold underline reverse;
}

Button.-primary {
    background: #22d3ee;
    color: #0f172a;
    border: solid #22d3ee;
    text-style: bold;
}

Button.quick-value {
    min-width: 12;
    width: 12;
    color: #22c55e;
}

Select {
    background: #181825;
    border: solid #3b82f6;
    min-height: 1;
    padding: 0 1;
}

Horizontal {
    height: auto;
    margin: 0 0 1 0;
}

Vertical, Horizontal {
    padding: 0 1;
}

#recharge-tab, #withdrawal-tab, #bonus-tab, #bank-accounts-tab {
    padding: 1 2;
}

.tab-title {
    text-style: bold;
    color: #67e8f9;
    margin-bottom: 1;
    border-bottom: solid #22d3ee;
    padding-bottom: 0;
}

.step-progress {
    color: #fbbf24;
    margin-bottom: 1;
}

.helper {
    color: #94a3b8;
    margin-bottom: 1;
}

.details {
    background: #181825;
    border: solid #3b82f6;
    padding: 0 1;
    margin: 0 0 1 0;
    color: #e2e8f0;
}

.result {
    min-height: 2;
    margin-top: 1;
    color: #f8fafc;
}

Label {
    color: #e2e8f0;
}

Input {
    background: #181825;
    border: solid #3b82f6;
    color: #e2e8f0;
    padding: 0 1;
    min-height: 1;
}

Static {
    color: #a6adc8;
}

.hidden {
    display: none;
}

ModalScreen {
    align: center middle;
}

ModalScreen > Vertical {
    border: solid #22d3ee;
    background: #181825;
    padding: 1 2;
    width: 72;
    height: auto;
}

#login-title, #remediation-title, #history-title {
    text-style: bold;
    color: #67e8f9;
    margin-bottom: 1;
}

#remediation-title {
    color: #f43f5e;
}
"""
