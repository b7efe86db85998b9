"""
Stylesheet definitions for the VibeSync dashboard.

Palette:
- Background: #0a0a12, cards #1a1a24
- Neon accents: purple #b026ff, blue #00f0ff, green #00ff9d, pink #ff0055
"""

DEEP_BG = "#0a0a12"
CARD_BG = "#1a1a24"
NEON_PURPLE = "#b026ff"
NEON_BLUE = "#00f0ff"
NEON_GREEN = "#00ff9d"
NEON_PINK = "#ff0055"


def get_dashboard_stylesheet() -> str:
    """Get the main window stylesheet."""
    return f"""
        QMainWindow, QWidget#central {{
            background-color: {DEEP_BG};
            color: #ffffff;
        }}

        QLabel {{
            color: #ffffff;
        }}

        QScrollArea {{
            background-color: transparent;
            border: none;
        }}

        QScrollArea > QWidget > QWidget {{
            background-color: transparent;
        }}

        QScrollBar:vertical {{
            background-color: {DEEP_BG};
            width: 8px;
            margin: 0;
        }}

        QScrollBar::handle:vertical {{
            background-color: #2d2d3a;
            min-height: 30px;
            border-radius: 4px;
        }}

        QScrollBar::add-line:vertical, QScrollBar::sub-line:vertical {{
            height: 0;
        }}

        /* Sidebar */
        #sidebar {{
            background-color: rgba(0, 0, 0, 0.2);
            border-right: 1px solid rgba(255, 255, 255, 0.05);
        }}

        #sidebarTitle {{
            color: #ffffff;
            font-size: 20px;
            font-weight: bold;
        }}

        #sidebarButton {{
            background-color: transparent;
            border: none;
            border-radius: 12px;
            color: #9ca3af;
            padding: 12px 14px;
            font-size: 14px;
            text-align: left;
        }}

        #sidebarButton:hover {{
            background-color: rgba(255, 255, 255, 0.05);
            color: #ffffff;
        }}

        #sidebarButton:checked {{
            background-color: rgba(255, 255, 255, 0.1);
            color: {NEON_BLUE};
        }}

        #languageButton {{
            background-color: transparent;
            border: 1px solid rgba(255, 255, 255, 0.1);
            border-radius: 12px;
            color: {NEON_GREEN};
            padding: 10px 14px;
            text-align: left;
        }}

        #assistantButton {{
            background-color: rgba(176, 38, 255, 0.2);
            border: 1px solid rgba(255, 255, 255, 0.1);
            border-radius: 14px;
            color: {NEON_PURPLE};
            padding: 14px;
            font-weight: 500;
        }}

        #assistantButton:hover {{
            border-color: rgba(255, 255, 255, 0.3);
        }}

        /* Header */
        #viewTitle {{
            color: #ffffff;
            font-size: 28px;
            font-weight: bold;
        }}

        #viewDescription {{
            color: #9ca3af;
            font-size: 14px;
        }}

        #systemStatus {{
            color: #9ca3af;
            background-color: rgba(255, 255, 255, 0.05);
            border: 1px solid rgba(255, 255, 255, 0.05);
            border-radius: 14px;
            padding: 6px 12px;
            font-size: 12px;
        }}

        /* Cards */
        #card {{
            background-color: rgba(255, 255, 255, 0.03);
            border: 1px solid rgba(255, 255, 255, 0.08);
            border-radius: 20px;
        }}

        #cardTitle {{
            color: #ffffff;
            font-size: 18px;
            font-weight: bold;
        }}

        #mutedLabel {{
            color: #6b7280;
            font-size: 12px;
        }}

        #moodLabel {{
            color: #ffffff;
            font-size: 32px;
            font-weight: bold;
        }}

        #genreLabel {{
            color: {NEON_BLUE};
            font-family: monospace;
            font-size: 16px;
        }}

        #tempoLabel {{
            color: {NEON_GREEN};
            font-family: monospace;
            font-size: 20px;
            font-weight: bold;
        }}

        #chip {{
            background-color: rgba(255, 255, 255, 0.05);
            border: 1px solid rgba(255, 255, 255, 0.1);
            border-radius: 8px;
            color: #e5e7eb;
            padding: 4px 10px;
        }}

        #scoreBadge {{
            background-color: rgba(255, 255, 255, 0.1);
            border-radius: 4px;
            color: {NEON_GREEN};
            font-family: monospace;
            font-size: 11px;
            padding: 2px 6px;
        }}

        #statusRecording {{
            color: {NEON_PINK};
            font-family: monospace;
            font-size: 12px;
        }}

        #statusReady {{
            color: #6b7280;
            font-family: monospace;
            font-size: 12px;
        }}

        /* Buttons */
        #primaryButton {{
            background-color: #ffffff;
            border: none;
            border-radius: 12px;
            color: #000000;
            font-weight: bold;
            padding: 14px;
        }}

        #primaryButton:hover {{
            background-color: {NEON_GREEN};
        }}

        #primaryButton:disabled {{
            background-color: rgba(255, 255, 255, 0.5);
        }}

        #stopButton {{
            background-color: {NEON_PINK};
            border: none;
            border-radius: 12px;
            color: #ffffff;
            font-weight: bold;
            padding: 14px;
        }}

        #linkButton {{
            background-color: transparent;
            border: none;
            color: #9ca3af;
            font-size: 12px;
            padding: 2px;
        }}

        #linkButton:hover {{
            color: {NEON_PURPLE};
        }}

        #deleteButton {{
            background-color: transparent;
            border: none;
            color: #6b7280;
            padding: 2px;
        }}

        #deleteButton:hover {{
            color: {NEON_PINK};
        }}

        QPlainTextEdit, QLineEdit {{
            background-color: rgba(0, 0, 0, 0.3);
            border: 1px solid rgba(255, 255, 255, 0.1);
            border-radius: 10px;
            color: #ffffff;
            padding: 8px;
        }}

        QPlainTextEdit:focus, QLineEdit:focus {{
            border-color: {NEON_BLUE};
        }}

        /* Chat */
        #chatPanel {{
            background-color: {CARD_BG};
            border: 1px solid rgba(255, 255, 255, 0.1);
            border-radius: 16px;
        }}

        #chatHeader {{
            background-color: {NEON_PURPLE};
            border-top-left-radius: 16px;
            border-top-right-radius: 16px;
        }}

        #chatUserBubble {{
            background-color: {NEON_BLUE};
            border-radius: 12px;
            color: #000000;
            padding: 8px 12px;
        }}

        #chatAssistantBubble {{
            background-color: rgba(176, 38, 255, 0.2);
            border: 1px solid rgba(255, 255, 255, 0.05);
            border-radius: 12px;
            color: #e5e7eb;
            padding: 8px 12px;
        }}
    """
