"""Translations for preview UI messages.

Supports automatic language detection based on system locale.
Includes action bar labels, tooltips and error messages.
"""

import locale
from typing import Dict

# Translation dictionaries for each supported language
TRANSLATIONS = {
    'en': {  # English (US/UK)
        'unable_to_display': 'Unable to display the document',
        'raster_unavailable': 'PDF rendering is not available on this system',
        # Action bar
        'print': 'Print',
        'share': 'Share',
        'page_format': 'Page format',
        'portrait': 'Portrait',
        'landscape': 'Landscape',
        'no_printers': 'No printer installed. Print to a PDF file instead',
        # Print dialog
        'print_dialog_title': 'Print {name}',
        'page_error': 'Error on page {page}: {error}',
    },
    'de': {  # German
        'unable_to_display': 'Das Dokument kann nicht angezeigt werden',
        'raster_unavailable': 'PDF-Darstellung ist auf diesem System nicht verfügbar',
        # Action bar
        'print': 'Drucken',
        'share': 'Teilen',
        'page_format': 'Seitenformat',
        'portrait': 'Hochformat',
        'landscape': 'Querformat',
        'no_printers': 'Kein Drucker installiert. Stattdessen in eine PDF-Datei drucken',
        # Print dialog
        'print_dialog_title': '{name} drucken',
        'page_error': 'Fehler auf Seite {page}: {error}',
    },
    'fr': {  # French
        'unable_to_display': "Impossible d'afficher le document",
        'raster_unavailable': "Le rendu PDF n'est pas disponible sur ce système",
        # Action bar
        'print': 'Imprimer',
        'share': 'Partager',
        'page_format': 'Format de page',
        'portrait': 'Portrait',
        'landscape': 'Paysage',
        'no_printers': 'Aucune imprimante installée. Imprimer dans un fichier PDF',
        # Print dialog
        'print_dialog_title': 'Imprimer {name}',
        'page_error': 'Erreur à la page {page}: {error}',
    },
    'es': {  # Spanish
        'unable_to_display': 'No se puede mostrar el documento',
        'raster_unavailable': 'La representación de PDF no está disponible en este sistema',
        # Action bar
        'print': 'Imprimir',
        'share': 'Compartir',
        'page_format': 'Formato de página',
        'portrait': 'Vertical',
        'landscape': 'Horizontal',
        'no_printers': 'No hay ninguna impresora instalada. Imprimir en un archivo PDF',
        # Print dialog
        'print_dialog_title': 'Imprimir {name}',
        'page_error': 'Error en la página {page}: {error}',
    },
    'it': {  # Italian
        'unable_to_display': 'Impossibile visualizzare il documento',
        'raster_unavailable': 'Il rendering PDF non è disponibile su questo sistema',
        # Action bar
        'print': 'Stampa',
        'share': 'Condividi',
        'page_format': 'Formato pagina',
        'portrait': 'Verticale',
        'landscape': 'Orizzontale',
        'no_printers': 'Nessuna stampante installata. Stampa su un file PDF',
        # Print dialog
        'print_dialog_title': 'Stampa {name}',
        'page_error': 'Errore a pagina {page}: {error}',
    },
    'pt': {  # Portuguese
        'unable_to_display': 'Não é possível exibir o documento',
        'raster_unavailable': 'A renderização de PDF não está disponível neste sistema',
        # Action bar
        'print': 'Imprimir',
        'share': 'Compartilhar',
        'page_format': 'Formato da página',
        'portrait': 'Retrato',
        'landscape': 'Paisagem',
        'no_printers': 'Nenhuma impressora instalada. Imprimir em um arquivo PDF',
        # Print dialog
        'print_dialog_title': 'Imprimir {name}',
        'page_error': 'Erro na página {page}: {error}',
    },
    'nl': {  # Dutch
        'unable_to_display': 'Het document kan niet worden weergegeven',
        'raster_unavailable': 'PDF-weergave is niet beschikbaar op dit systeem',
        # Action bar
        'print': 'Afdrukken',
        'share': 'Delen',
        'page_format': 'Paginaformaat',
        'portrait': 'Staand',
        'landscape': 'Liggend',
        'no_printers': 'Geen printer geïnstalleerd. Afdrukken naar een PDF-bestand',
        # Print dialog
        'print_dialog_title': '{name} afdrukken',
        'page_error': 'Fout op pagina {page}: {error}',
    },
    'zh': {  # Chinese (Simplified)
        'unable_to_display': '无法显示文档',
        'raster_unavailable': '此系统不支持PDF渲染',
        # Action bar
        'print': '打印',
        'share': '分享',
        'page_format': '页面格式',
        'portrait': '纵向',
        'landscape': '横向',
        'no_printers': '未安装打印机。请打印到PDF文件',
        # Print dialog
        'print_dialog_title': '打印 {name}',
        'page_error': '第 {page} 页出错: {error}',
    },
}


class SafeDict(dict):
    def __missing__(self, key):
        return "Translation missing"


def get_translations(lang_code: str = None) -> Dict[str, str]:
    if lang_code is None:
        lang_code = 'en'
        try:
            system_locale = locale.getlocale()[0]
            if system_locale:
                lang_code = system_locale.split('_')[0].lower()
        except (ValueError, IndexError):
            pass

    # Pick the correct translation dict (fallback to English)
    base = TRANSLATIONS.get(lang_code, TRANSLATIONS['en'])

    # Wrap it in SafeDict
    return SafeDict(base)


def get_available_languages() -> list:
    """Get list of available language codes.

    Returns:
        List of ISO 639-1 language codes.
    """
    return list(TRANSLATIONS.keys())
