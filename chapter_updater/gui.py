"""Neumorphic single-page form for the Chapter Updater."""
from __future__ import annotations

from chapter_updater.dispatcher import CREDENTIAL_HEADER, DEFAULT_TARGET_URL

GUI_TITLE = "Bunny.net Chapter Update Tool"


def get_gui_html() -> str:
    """Return the HTML for the chapter notes and request form."""
    html = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>__TITLE__</title>
    <style>
      :root {
        color-scheme: light;
        --bg: #e6ebf1;
        --shadow-light: #ffffff;
        --shadow-dark: #c8ced8;
        --accent: #1f6feb;
        --accent-alt: #7c3aed;
        --success: #1a7f37;
        --danger: #cf222e;
        --text: #1f2430;
        --muted: #6c7485;
        --surface: #f3f6fb;
      }

      * {
        box-sizing: border-box;
      }

      body {
        margin: 0;
        font-family: "SF Pro Display", "Segoe UI", system-ui, -apple-system, sans-serif;
        background: var(--bg);
        color: var(--text);
      }

      .app {
        min-height: 100vh;
        padding: 36px 32px 72px;
      }

      .form-view {
        max-width: 960px;
        margin: 0 auto;
        display: grid;
        gap: 28px;
      }

      h1 {
        margin: 0;
        text-align: center;
        font-size: 30px;
      }

      h3 {
        margin: 0 0 12px;
        font-size: 18px;
      }

      .panel {
        padding: 24px 28px;
        border-radius: 28px;
        background: var(--bg);
        box-shadow: 14px 14px 28px var(--shadow-dark), -14px -14px 28px var(--shadow-light);
      }

      label {
        display: block;
        margin-bottom: 8px;
        font-size: 13px;
        font-weight: 600;
        color: var(--muted);
      }

      input,
      textarea {
        width: 100%;
        border: none;
        border-radius: 16px;
        padding: 12px 16px;
        background: var(--surface);
        color: var(--text);
        font-size: 14px;
        box-shadow: inset 4px 4px 8px var(--shadow-dark), inset -4px -4px 8px var(--shadow-light);
      }

      textarea {
        font-family: "SF Mono", "Menlo", monospace;
        resize: vertical;
      }

      .url-bar {
        margin-top: 20px;
        display: flex;
        align-items: center;
        gap: 12px;
      }

      .method-chip {
        padding: 8px 14px;
        border-radius: 999px;
        background: rgba(210, 153, 34, 0.18);
        color: #9a6700;
        font-size: 13px;
        font-weight: 700;
      }

      .pill-button {
        border: none;
        padding: 12px 20px;
        border-radius: 999px;
        background: var(--bg);
        color: var(--text);
        font-weight: 600;
        box-shadow: 8px 8px 16px var(--shadow-dark), -8px -8px 16px var(--shadow-light);
        cursor: pointer;
        display: inline-flex;
        align-items: center;
        gap: 8px;
        flex-shrink: 0;
      }

      .pill-button.primary {
        color: white;
        background: var(--accent);
        box-shadow: 8px 8px 16px rgba(31, 111, 235, 0.35), -8px -8px 16px var(--shadow-light);
      }

      .pill-button.magic {
        color: white;
        background: var(--accent-alt);
        box-shadow: 8px 8px 16px rgba(124, 58, 237, 0.35), -8px -8px 16px var(--shadow-light);
      }

      .pill-button:disabled {
        opacity: 0.5;
        cursor: not-allowed;
      }

      .spinner {
        width: 14px;
        height: 14px;
        border-radius: 50%;
        border: 2px solid rgba(255, 255, 255, 0.4);
        border-top-color: white;
        animation: spin 0.8s linear infinite;
      }

      @keyframes spin {
        to {
          transform: rotate(360deg);
        }
      }

      .actions {
        margin-top: 16px;
        display: flex;
        gap: 12px;
        align-items: center;
      }

      .hint {
        font-size: 12px;
        color: var(--muted);
      }

      .error-banner {
        padding: 14px 18px;
        border-radius: 18px;
        background: rgba(207, 34, 46, 0.12);
        color: var(--danger);
        font-size: 14px;
        margin-bottom: 12px;
      }

      .status-row {
        display: flex;
        align-items: center;
        gap: 12px;
        margin-bottom: 12px;
      }

      .status-chip {
        display: inline-flex;
        align-items: center;
        padding: 6px 12px;
        border-radius: 999px;
        font-size: 12px;
        font-weight: 600;
      }

      .status-chip.success {
        background: rgba(26, 127, 55, 0.14);
        color: var(--success);
      }

      .status-chip.failure {
        background: rgba(207, 34, 46, 0.14);
        color: var(--danger);
      }

      pre {
        margin: 0;
        padding: 16px;
        border-radius: 18px;
        background: #1f2430;
        color: #e6ebf1;
        font-size: 13px;
        white-space: pre-wrap;
        word-break: break-all;
      }

      .note-panel {
        padding: 18px 22px;
        border-radius: 22px;
        border-left: 4px solid #d29922;
        background: rgba(210, 153, 34, 0.12);
        color: #7d4e00;
        font-size: 13px;
      }

      .hidden {
        display: none;
      }
    </style>
  </head>
  <body>
    <div class="app">
      <main class="form-view" id="formView">
        <h1>__TITLE__</h1>

        <section class="panel" id="requestPanel">
          <label for="accessKey">Bunny.net API Key</label>
          <input id="accessKey" type="password" placeholder="Your __CREDENTIAL_HEADER__" autocomplete="off" />
          <div class="url-bar">
            <span class="method-chip">POST</span>
            <input id="apiUrl" type="text" value="__DEFAULT_URL__" placeholder="Enter request URL" />
            <button class="pill-button primary" id="sendButton" type="button" disabled>
              <span class="spinner hidden" id="sendSpinner"></span>
              <span id="sendLabel">Send</span>
            </button>
          </div>
        </section>

        <section class="panel" id="bodyPanel">
          <h3>Request Body / Notes</h3>
          <textarea
            id="bodyContent"
            rows="12"
            placeholder="Paste chapter notes here (e.g., &quot;0:00 Intro&quot;) and click &quot;Generate JSON with AI&quot;,&#10;or paste final JSON directly."
          ></textarea>
          <div class="actions">
            <button class="pill-button magic" id="generateButton" type="button" disabled>
              <span class="spinner hidden" id="generateSpinner"></span>
              <span id="generateLabel">Generate JSON with AI</span>
            </button>
            <span class="hint hidden" id="aiUnavailable">
              No AI key is configured on the server. Paste JSON directly.
            </span>
          </div>
        </section>

        <section class="panel" id="responsePanel">
          <h3>Response</h3>
          <div class="error-banner hidden" id="errorMessage" role="alert"></div>
          <div class="hidden" id="responseResult">
            <div class="status-row">
              <span>Status:</span>
              <span class="status-chip" id="responseStatus"></span>
            </div>
            <pre><code class="language-json" id="responseBody"></code></pre>
          </div>
          <p class="hint" id="responseEmpty">Click 'Send' to get a response.</p>
        </section>

        <section class="note-panel">
          <strong>Security &amp; Usage Note</strong>
          <p>
            This is an internal tool. Your Bunny.net API key is forwarded by this local
            server as the __CREDENTIAL_HEADER__ header. The AI feature uses an API key from
            the server environment. Do not expose this tool publicly.
          </p>
        </section>
      </main>
    </div>

    <script>
      const accessKey = document.getElementById('accessKey');
      const apiUrl = document.getElementById('apiUrl');
      const bodyContent = document.getElementById('bodyContent');
      const sendButton = document.getElementById('sendButton');
      const generateButton = document.getElementById('generateButton');
      const errorMessage = document.getElementById('errorMessage');
      const responseResult = document.getElementById('responseResult');
      const responseStatus = document.getElementById('responseStatus');
      const responseBody = document.getElementById('responseBody');
      const responseEmpty = document.getElementById('responseEmpty');

      const state = {
        aiAvailable: false,
        isGenerating: false,
        isSending: false,
      };

      const postJson = async (path, payload) => {
        const response = await fetch(path, {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify(payload),
        });
        const text = await response.text();
        let data = {};
        try {
          data = text ? JSON.parse(text) : {};
        } catch (error) {
          data = { error: text };
        }
        if (!response.ok) {
          throw new Error(data.error || `Request failed: ${response.status}`);
        }
        return data;
      };

      const fetchJson = async (path) => {
        const response = await fetch(path);
        if (!response.ok) {
          throw new Error(`Request failed: ${response.status}`);
        }
        return response.json();
      };

      const isBusy = () => state.isGenerating || state.isSending;

      const updateControls = () => {
        const hasBody = bodyContent.value.length > 0;
        sendButton.disabled =
          !accessKey.value || !apiUrl.value.startsWith('https') || !hasBody || isBusy();
        generateButton.disabled = !state.aiAvailable || !hasBody || isBusy();
        document.getElementById('sendSpinner').classList.toggle('hidden', !state.isSending);
        document.getElementById('sendLabel').textContent = state.isSending ? 'Sending...' : 'Send';
        document
          .getElementById('generateSpinner')
          .classList.toggle('hidden', !state.isGenerating);
        document.getElementById('generateLabel').textContent = state.isGenerating
          ? 'Generating...'
          : 'Generate JSON with AI';
      };

      const showError = (message) => {
        errorMessage.textContent = message ? `Error! ${message}` : '';
        errorMessage.classList.toggle('hidden', !message);
        responseEmpty.classList.toggle('hidden', Boolean(message) || !responseResult.classList.contains('hidden'));
      };

      const showOutcome = (outcome) => {
        if (!outcome) {
          responseResult.classList.add('hidden');
          responseEmpty.classList.toggle('hidden', !errorMessage.classList.contains('hidden'));
          return;
        }
        responseStatus.textContent = outcome.status;
        responseStatus.classList.toggle('success', outcome.success);
        responseStatus.classList.toggle('failure', !outcome.success);
        responseBody.textContent = JSON.stringify(outcome.data, null, 2);
        responseResult.classList.remove('hidden');
        responseEmpty.classList.add('hidden');
      };

      const resetResponse = () => {
        showError('');
        showOutcome(null);
      };

      const handleGenerateJson = async () => {
        if (!bodyContent.value) {
          showError('The text area is empty. Please add chapter notes.');
          return;
        }
        if (isBusy()) {
          return;
        }
        state.isGenerating = true;
        resetResponse();
        updateControls();
        try {
          const data = await postJson('/api/generate', { notes: bodyContent.value });
          bodyContent.value = data.body;
        } catch (error) {
          showError(error.message || 'An unknown error occurred during JSON generation.');
        } finally {
          state.isGenerating = false;
          updateControls();
        }
      };

      const handleSendRequest = async () => {
        resetResponse();
        if (!accessKey.value || !apiUrl.value || !bodyContent.value) {
          showError('API Key, Request URL, and a Request Body are required.');
          return;
        }
        if (isBusy()) {
          return;
        }
        state.isSending = true;
        updateControls();
        try {
          const data = await postJson('/api/send', {
            access_key: accessKey.value,
            url: apiUrl.value,
            body: bodyContent.value,
          });
          if (data.generated) {
            bodyContent.value = data.body;
          }
          showOutcome(data.outcome);
        } catch (error) {
          showError(error.message || 'An unknown network error occurred.');
        } finally {
          state.isSending = false;
          updateControls();
        }
      };

      const loadConfig = async () => {
        try {
          const config = await fetchJson('/api/config');
          state.aiAvailable = Boolean(config.ai_available);
        } catch (error) {
          state.aiAvailable = false;
        }
        document.getElementById('aiUnavailable').classList.toggle('hidden', state.aiAvailable);
        updateControls();
      };

      [accessKey, apiUrl, bodyContent].forEach((input) => {
        input.addEventListener('input', updateControls);
      });
      sendButton.addEventListener('click', handleSendRequest);
      generateButton.addEventListener('click', handleGenerateJson);

      loadConfig();
    </script>
  </body>
</html>
"""
    return (
        html.replace("__TITLE__", GUI_TITLE)
        .replace("__DEFAULT_URL__", DEFAULT_TARGET_URL)
        .replace("__CREDENTIAL_HEADER__", CREDENTIAL_HEADER)
    )


__all__ = ["get_gui_html", "GUI_TITLE"]
