from services.file_validation import (
    FileInfo,
    format_file_size,
    get_file_icon,
    get_file_size_limit,
    get_file_type_category,
    get_file_validation_error,
    validate_file_size,
    validate_file_type,
    validate_multiple_files,
)

MB = 1024 * 1024


def test_size_limit_by_class_and_mimetype():
    assert get_file_size_limit("application/pdf", "avatar") == 250 * 1024
    assert get_file_size_limit("image/png") == 500 * 1024
    assert get_file_size_limit("application/pdf") == 2 * MB
    assert get_file_size_limit("text/plain") == 2 * MB


def test_format_file_size():
    assert format_file_size(0) == "0 Bytes"
    assert format_file_size(1024) == "1.00 KB"
    assert format_file_size(3 * MB) == "3.00 MB"
    assert format_file_size(1536) == "1.50 KB"


def test_type_and_size_checks():
    pdf = FileInfo("cv.pdf", "application/pdf", 1000)
    assert validate_file_type(pdf, "documents")
    assert not validate_file_type(pdf, "images")
    assert validate_file_size(pdf, "document")
    assert not validate_file_size(FileInfo("big.png", "image/png", 600 * 1024))


def test_oversized_pdf_message():
    """A 3 MB PDF against the document ceiling reports both sizes"""
    error = get_file_validation_error(FileInfo("big.pdf", "application/pdf", 3 * MB), "documents", "document")
    assert error == "File size too large. Current: 3.00 MB, Maximum: 2.00 MB"


def test_wrong_type_reported_before_size():
    error = get_file_validation_error(FileInfo("notes.txt", "text/plain", 10 * MB), "documents")
    assert error == "Invalid file type. Allowed types: PDF, Word, Excel"


def test_valid_file_has_no_error():
    assert get_file_validation_error(FileInfo("a.png", "image/png", 100 * 1024), "images", "image") is None


def test_validate_multiple_files_keeps_order_and_indexes():
    files = [
        FileInfo("a.pdf", "application/pdf", 1000),
        FileInfo("b.exe", "application/x-msdownload", 1000),
        FileInfo("c.png", "image/png", 1000),
    ]
    result = validate_multiple_files(files, "all")
    assert not result["is_valid"]
    assert [f.filename for f in result["valid_files"]] == ["a.pdf", "c.png"]
    assert result["errors"] == [
        {"file": "b.exe", "index": 1, "error": "Invalid file type. Allowed types: PDF, Word, Excel, JPEG, PNG, GIF"}
    ]


def test_category_and_icon():
    assert get_file_type_category("application/msword") == "document"
    assert get_file_type_category("image/gif") == "image"
    assert get_file_type_category("text/plain") == "unknown"
    assert get_file_icon("application/pdf") == "📄"
    assert get_file_icon("application/vnd.ms-excel") == "📊"
    assert get_file_icon("text/plain") == "📁"


def test_small_png_is_a_valid_avatar():
    assert get_file_validation_error(FileInfo("me.png", "image/png", 100 * 1024), "avatars", "avatar") is None


def test_explicit_class_sets_ceiling():
    png = FileInfo("scan.png", "image/png", 1 * MB)
    assert get_file_size_limit("image/png", "document") == 2 * MB
    assert get_file_validation_error(png, "all", "document") is None
    assert get_file_validation_error(png, "all", "default") == "File size too large. Current: 1.00 MB, Maximum: 500.00 KB"
