from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """
    Page-number pagination with a client-controlled page size.

    Compliance logs and payroll records are listed per organization, so the
    client may ask for larger pages than the default (capped at 200).
    """

    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 200
