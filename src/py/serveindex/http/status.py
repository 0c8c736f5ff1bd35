# --
# Reason phrases for the statuses the index middleware and its bridge can
# produce.

HTTP_STATUS: dict[int, str] = {
	200: "OK",
	204: "No Content",
	304: "Not Modified",
	400: "Bad Request",
	403: "Forbidden",
	404: "Not Found",
	405: "Method Not Allowed",
	406: "Not Acceptable",
	414: "URI Too Long",
	500: "Internal Server Error",
}


# EOF
