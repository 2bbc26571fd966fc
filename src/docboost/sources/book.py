"""
Built-in sample of the CakePHP book.

A small, static set of pages so a fresh install has something to search
before any real documentation directory is configured.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Final

from docboost.models import Document

BOOK_SOURCE_TAG: Final[str] = "cakephp-5.x"
_BOOK_URL: Final[str] = "https://book.cakephp.org/5/en"

_PAGES: Final[list[tuple[str, str, str, str]]] = [
    (
        "Database Basics - Saving Data",
        "orm/saving-data.html",
        "orm",
        "To save data, first create a new entity using newEntity(), then call save() on "
        "the table object. Example: $article = $this->Articles->newEntity($data); "
        "$this->Articles->save($article);",
    ),
    (
        "Associations - BelongsToMany",
        "orm/associations.html#belongstomany",
        "orm",
        "The belongsToMany association is used when two models are associated through a "
        "join table. Example: $this->belongsToMany('Tags', ['joinTable' => 'articles_tags']);",
    ),
    (
        "Validation Rules",
        "core-libraries/validation.html",
        "validation",
        "Add validation rules in your Table class validationDefault() method. Example: "
        "$validator->notEmptyString('title')->minLength('title', 10);",
    ),
    (
        "Controllers - Request and Response",
        "controllers/request-response.html",
        "controller",
        "Controllers receive a request object via $this->request and return responses. "
        "Example: $data = $this->request->getData(); return "
        "$this->response->withType('json')->withStringBody(json_encode($data));",
    ),
    (
        "Query Builder - Finding Data",
        "orm/query-builder.html",
        "orm",
        "Use the query builder to find data with conditions. Example: $query = "
        "$this->Articles->find()->where(['published' => true])->orderBy(['created' => 'DESC']);",
    ),
    (
        "Authentication Plugin",
        "controllers/middleware.html#authentication",
        "authentication",
        "CakePHP 5 uses the Authentication plugin for handling user authentication. Configure "
        "authenticators and identifiers in your Application class getAuthenticationService() method.",
    ),
    (
        "Middleware - Creating Custom Middleware",
        "controllers/middleware.html",
        "middleware",
        "Create middleware by implementing MiddlewareInterface with a process() method. Add it "
        "to the middleware queue in the Application middleware() method.",
    ),
    (
        "Testing - Controller Tests",
        "development/testing.html",
        "testing",
        "Controller tests use the IntegrationTestTrait. Use $this->get() and $this->post() to "
        "test actions, then assert on the response with assertResponseOk().",
    ),
    (
        "Routing - Route Prefixes",
        "development/routing.html",
        "routing",
        "Use route prefixes to group related routes. Example: $routes->prefix('Admin', "
        "function ($routes) { $routes->connect('/users', ['controller' => 'Users']); });",
    ),
    (
        "Behaviors - Adding Behaviors",
        "orm/behaviors.html",
        "orm",
        "Add behaviors to tables in the initialize() method. Example: "
        "$this->addBehavior('Timestamp'); Behaviors share reusable logic between tables.",
    ),
    (
        "Pagination",
        "controllers/pagination.html",
        "controller",
        "Use paginate() in controllers to paginate query results. Example: $articles = "
        "$this->paginate($this->Articles); Render the controls with the PaginatorHelper.",
    ),
    (
        "Database Transactions",
        "orm/database-basics.html#transactions",
        "orm",
        "Wrap database operations in transactions for atomicity. Example: "
        "$connection->transactional(function ($connection) { ... }); or call begin(), "
        "commit() and rollback() yourself.",
    ),
    (
        "Caching",
        "core-libraries/caching.html",
        "caching",
        "Cache expensive results with the Cache class. Example: Cache::write('key', $data); "
        "$data = Cache::read('key');",
    ),
]


class BookSource:
    """Yields the bundled sample pages as ``book`` documents."""

    name = "book"
    doc_type = "book"

    def documents(self) -> Iterator[Document]:
        for title, path, category, body in _PAGES:
            yield Document(
                url=f"{_BOOK_URL}/{path}",
                title=title,
                body=body,
                type=self.doc_type,
                category=category,
                source=BOOK_SOURCE_TAG,
            )
