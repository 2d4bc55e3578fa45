"""
Streamlit frontend for OCR Records.

This frontend communicates exclusively with the FastAPI backend via REST API.
Run with: streamlit run ocr_records/frontend/app.py
"""

import html
import os
from typing import Optional

import requests
from PIL import Image

import streamlit as st

# Configuration
API_BASE_URL = os.getenv("API_URL", "http://localhost:5000")

FALLBACK_LANGUAGES = [{"code": "eng", "name": "English"}]

# Page configuration
st.set_page_config(
    page_title="OCR Records",
    page_icon="📄",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header {
        background: linear-gradient(90deg, #667eea 0%, #764ba2 100%);
        -webkit-background-clip: text;
        -webkit-text-fill-color: transparent;
        font-size: 3rem;
        font-weight: 800;
        text-align: center;
        margin-bottom: 0.5rem;
    }

    .sub-header {
        color: #a0aec0;
        text-align: center;
        font-size: 1.1rem;
        margin-bottom: 2rem;
    }

    .record-meta {
        color: #a0aec0;
        font-size: 0.85rem;
    }
</style>
""", unsafe_allow_html=True)


def record_meta_html(record: dict) -> str:
    """Language and timestamp line; both values are stored as the client sent them."""
    language = html.escape(str(record.get("language", "")))
    created_at = html.escape(str(record.get("createdAt", "")))
    return f'<span class="record-meta">{language} · {created_at}</span>'


class RecordsClient:
    """Client for communicating with the OCR Records API."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()

    def health_check(self) -> dict:
        """Check API health."""
        try:
            response = self.session.get(f"{self.base_url}/api/health/ready", timeout=5)
            return response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            return {"status": "unhealthy", "error": str(e)}

    def languages(self) -> list:
        try:
            response = self.session.get(f"{self.base_url}/api/languages", timeout=5)
            return response.json().get("languages", FALLBACK_LANGUAGES)
        except (requests.exceptions.RequestException, ValueError):
            return FALLBACK_LANGUAGES

    def upload(self, image_bytes: bytes, filename: str, content_type: str, language: str) -> dict:
        """Upload an image for text extraction."""
        try:
            response = self.session.post(
                f"{self.base_url}/api/upload",
                files={"image": (filename, image_bytes, content_type)},
                data={"language": language},
                timeout=300
            )
            return response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            return {"success": False, "error": str(e)}

    def list_records(self, search: Optional[str] = None) -> dict:
        params = {"search": search} if search else None
        try:
            response = self.session.get(f"{self.base_url}/api/records", params=params, timeout=10)
            return response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            return {"success": False, "error": str(e), "records": [], "count": 0}

    def delete_record(self, record_id: str) -> dict:
        try:
            response = self.session.delete(f"{self.base_url}/api/records/{record_id}", timeout=10)
            return response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            return {"success": False, "error": str(e)}

    def image_url(self, record: dict) -> str:
        return f"{self.base_url}{record['imageUrl']}"


@st.cache_resource
def get_client():
    return RecordsClient(API_BASE_URL)


def render_header():
    """Render the main header."""
    st.markdown('<h1 class="main-header">🔍 OCR Records</h1>', unsafe_allow_html=True)
    st.markdown(
        '<p class="sub-header">Extract text from images and keep a searchable archive</p>',
        unsafe_allow_html=True
    )


def render_sidebar() -> dict:
    """Render the sidebar with settings."""
    client = get_client()

    with st.sidebar:
        st.markdown("## ⚙️ Settings")

        health = client.health_check()
        if health.get("status") == "healthy":
            st.success("🟢 API Connected")
        elif health.get("status") == "degraded":
            st.warning("🟡 API Degraded")
        else:
            st.error("🔴 API Unavailable")

        st.markdown("---")

        languages = client.languages()
        codes = [lang["code"] for lang in languages]
        names = {lang["code"]: lang["name"] for lang in languages}

        language = st.selectbox(
            "Language",
            options=codes,
            index=codes.index("eng") if "eng" in codes else 0,
            format_func=lambda code: f"{names.get(code, code)} ({code})",
            help="Language of the text in the image"
        )

    return {"language": language}


def render_upload_tab(settings: dict):
    """Render the upload form."""
    client = get_client()

    st.markdown("### 📤 Upload Image")

    uploaded_file = st.file_uploader(
        "Choose an image",
        type=["png", "jpg", "jpeg", "gif", "bmp", "tiff", "webp"],
        help="Supported formats: PNG, JPEG, GIF, BMP, TIFF, WEBP (max 10MB)"
    )

    if uploaded_file:
        col1, col2 = st.columns([1, 1])

        with col1:
            st.markdown("#### Preview")
            image = Image.open(uploaded_file)
            st.image(image, width='stretch')
            st.caption(f"Size: {image.width}×{image.height} | Format: {image.format}")

        with col2:
            st.markdown("#### Actions")

            if st.button("🚀 Extract Text", type="primary"):
                with st.spinner("Processing image..."):
                    uploaded_file.seek(0)
                    result = client.upload(
                        uploaded_file.read(),
                        uploaded_file.name,
                        uploaded_file.type,
                        settings["language"]
                    )
                    st.session_state["last_result"] = result

    if "last_result" in st.session_state:
        result = st.session_state["last_result"]

        st.markdown("---")
        st.markdown("### 📝 Extracted Text")

        if result.get("success"):
            record = result["record"]
            st.success(result.get("message", "Record saved"))
            st.text_area(
                "Extracted Text",
                record.get("extractedText", ""),
                height=300,
                label_visibility="collapsed"
            )
            st.download_button(
                "📥 Download as TXT",
                record.get("extractedText", ""),
                file_name="ocr_result.txt",
                mime="text/plain"
            )
        else:
            detail = result.get("details")
            message = result.get("error", "Unknown error")
            st.error(f"❌ {message}" + (f": {detail}" if detail else ""))


def render_records_tab():
    """Render the searchable record gallery."""
    client = get_client()

    st.markdown("### 📚 Saved Records")

    search = st.text_input("Search extracted text", placeholder="Type to search...")
    result = client.list_records(search.strip() or None)

    if not result.get("success", False):
        st.error(f"Failed to fetch records: {result.get('error', 'Unknown error')}")
        return

    records = result.get("records", [])

    if search:
        st.caption(f'Found {len(records)} record(s) matching "{search}"')

    if not records:
        st.info("No matching records found" if search else "No records yet. Upload your first image to get started.")
        return

    for record in records:
        with st.container(border=True):
            col1, col2 = st.columns([1, 3])

            with col1:
                st.image(client.image_url(record), width='stretch')

            with col2:
                st.markdown(record_meta_html(record), unsafe_allow_html=True)
                st.text(record["extractedText"] or "(no text found)")

                if st.button("🗑️ Delete", key=f"delete_{record['id']}"):
                    deleted = client.delete_record(record["id"])
                    if deleted.get("success"):
                        st.toast("Record deleted successfully")
                    else:
                        st.toast(f"Failed to delete record: {deleted.get('error', 'Unknown error')}")
                    st.rerun()


def main():
    """Main application entry point."""
    render_header()
    settings = render_sidebar()

    tab1, tab2 = st.tabs(["📄 Upload", "📚 Records"])

    with tab1:
        render_upload_tab(settings)

    with tab2:
        render_records_tab()


if __name__ == "__main__":
    main()
