"""TCSS for the chat TUI.

Two columns: the conversation on the left, raw stream and log stacked on the
right, with the status row and input spanning the bottom.
"""

APP_CSS = """
Screen {
    layout: grid;
    grid-size: 2 2;
    grid-columns: 3fr 2fr;
    grid-rows: 1fr auto;
    background: $background;
}

/* Bordered panels share one look; only the accent differs */
#chat-history, #raw-stream, #debug-panel {
    background: $panel;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;
}

#chat-history {
    height: 100%;
    border: round $primary 60%;
    border-title-color: $primary;

    &:focus-within {
        border: round $primary-lighten-1;
    }

    &.-maximized {
        column-span: 2;
    }
}

#right-panel {
    height: 100%;
}

#raw-stream {
    height: 2fr;
    border: round $secondary 60%;
    border-title-color: $secondary;

    /* set while a request is in flight */
    &.streaming {
        border: round $warning;
        border-title-color: $warning;
    }
}

#raw-stream-text {
    height: auto;
    color: $text-muted;
}

#debug-panel {
    height: 1fr;
    min-height: 6;
    margin-top: 1;
    border: round $accent 60%;
    border-title-color: $accent;
    overflow-x: auto;
}

#bottom-bar {
    column-span: 2;
    height: auto;
    padding: 1;
    background: $panel;
    border-top: solid $border;
}

#status-row {
    height: 3;
    margin-bottom: 1;
}

#status-line {
    width: 1fr;
    padding: 1 2;
    background: $surface;
}

#model-select {
    width: 32;
}

ChatInputBar {
    height: 5;
    background: $panel;
    border: round $primary 60%;

    &:focus-within {
        border: round $primary;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    background: transparent;
}

#send-btn {
    width: 12;
    min-width: 8;
    height: 100%;
    margin-left: 1;
    background: $success;
    color: $background;
    text-style: bold;

    &:disabled {
        background: $surface;
        color: $text-muted;
    }
}

/* Messages: a colored left rule marks the role */
.chat-message {
    height: auto;
    margin-bottom: 1;
    padding: 1 2;
}

.user-message {
    border-left: tall $success;
    background: $success 8%;
}

.assistant-message {
    border-left: tall $secondary;
    background: $secondary 8%;
}

.error-message {
    border-left: tall $error;
    background: $error 10%;
    color: $error;
}

.user-message .message-header {
    color: $success;
    text-style: bold;
}

.assistant-message .message-header {
    color: $secondary;
    text-style: bold;
}

.message-header, .message-content, .reasoning-content {
    height: auto;
}

.reasoning {
    height: auto;
    border: none;
    padding: 0;
    background: transparent;
}

.reasoning-content, #thinking-indicator {
    color: $text-muted;
    text-style: italic;
}

Toast.-error {
    background: $error 12%;
}

* {
    scrollbar-size: 1 1;
    scrollbar-color-hover: $primary 50%;
}

Header {
    height: 1;
    background: $panel;
}
"""
