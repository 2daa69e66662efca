# frontend/pdf_viewer.py
"""Opens server-generated PDFs: resolves the URL for this build and hands it to a viewer"""
import logging
import webbrowser

from frontend.api_client import ApiError

logger = logging.getLogger(__name__)

# entity kind -> API collection
ENTITY_PATHS = {
    'quote': '/api/quotes',
    'quotes': '/api/quotes',
    'service': '/api/services',
    'services': '/api/services',
    'work_order': '/api/work-orders',
    'work-order': '/api/work-orders',
    'work-orders': '/api/work-orders',
}


def resolve_pdf_url(path, settings):
    """
    Absolute URL for a PDF path. http(s) URLs pass through; relative paths
    join the mobile server URL or the web origin depending on the build.
    """
    if path.startswith('http://') or path.startswith('https://'):
        return path
    if not path.startswith('/'):
        path = '/' + path
    return f"{settings.base_url}{path}"


class PdfViewer:

    def __init__(self, client, opener=None):
        self.client = client
        self.settings = client.settings
        self.opener = opener or webbrowser.open
        self.alert = None

    def open_path(self, path):
        """Open a PDF by path; returns the URL, or None with ``alert`` set"""
        self.alert = None
        url = resolve_pdf_url(path, self.settings)
        # new tab on web, the system viewer on mobile
        opened = self.opener(url, new=0 if self.settings.is_mobile else 2)
        if opened is False:
            self.alert = 'Não foi possível abrir o PDF'
            return None
        logger.info(f"Opened PDF {url}")
        return url

    def open_entity(self, entity_id, kind):
        """
        Open the PDF of a quote, service or work order, generating it when
        the record has none yet.
        """
        self.alert = None
        collection = ENTITY_PATHS.get(kind)
        if collection is None:
            raise ValueError(f"Unknown entity kind: {kind}")

        try:
            record = self.client.get(f"{collection}/{entity_id}", use_cache=False)
            pdf_path = record.get('pdfPath')
            if not pdf_path:
                pdf_path = self.client.post(f"{collection}/{entity_id}/generate-pdf")['pdfPath']
                self.client.invalidate(collection)
        except ApiError as e:
            logger.warning(f"Could not fetch PDF for {kind} {entity_id}: {e.message}")
            self.alert = f"Erro ao carregar o PDF: {e.message}"
            return None

        return self.open_path(pdf_path)
