# ABOUTME: Canned Google Books API response fixtures for testing.
# ABOUTME: Provides realistic JSON dicts matching the /volumes response shape.

DUNE_VOLUME = {
    "kind": "books#volume",
    "id": "B1hSG45JCX4C",
    "volumeInfo": {
        "title": "Dune",
        "authors": ["Frank Herbert"],
        "publishedDate": "1965-08-01",
        "description": "Set on the desert planet Arrakis.",
        "industryIdentifiers": [
            {"type": "ISBN_10", "identifier": "0441172717"},
            {"type": "ISBN_13", "identifier": "9780441172719"},
        ],
        "pageCount": 604,
        "categories": ["Fiction"],
        "imageLinks": {
            "smallThumbnail": "http://books.google.com/books/content?id=B1hSG45JCX4C&zoom=5",
            "thumbnail": "http://books.google.com/books/content?id=B1hSG45JCX4C&zoom=1",
        },
    },
}

DUNE_MESSIAH_VOLUME = {
    "kind": "books#volume",
    "id": "jXwgAQAAIAAJ",
    "volumeInfo": {
        "title": "Dune Messiah",
        "authors": ["Frank Herbert"],
        "publishedDate": "1969",
        "industryIdentifiers": [{"type": "ISBN_10", "identifier": "0593098234"}],
    },
}

GOOD_OMENS_VOLUME = {
    "kind": "books#volume",
    "id": "Ot2cDwAAQBAJ",
    "volumeInfo": {
        "title": "Good Omens",
        "authors": ["Terry Pratchett", "Neil Gaiman"],
        "publishedDate": "2019-05",
        "imageLinks": {
            "thumbnail": "http://books.google.com/books/content?id=Ot2cDwAAQBAJ&zoom=1",
            "large": "http://books.google.com/books/content?id=Ot2cDwAAQBAJ&zoom=3",
        },
    },
}

BARE_VOLUME = {
    "kind": "books#volume",
    "id": "bare-volume",
    "volumeInfo": {},
}

SEARCH_RESPONSE = {
    "kind": "books#volumes",
    "totalItems": 2,
    "items": [DUNE_VOLUME, DUNE_MESSIAH_VOLUME],
}

ISBN_RESPONSE = {
    "kind": "books#volumes",
    "totalItems": 1,
    "items": [DUNE_VOLUME],
}

EMPTY_RESPONSE = {
    "kind": "books#volumes",
    "totalItems": 0,
}
