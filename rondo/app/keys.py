QUIT = ("q", "ctrl+c")
HELP = ("?",)
TAB = ("tab",)
UNDO = ("ctrl+z",)
EXPORT = ("X",)
FOCUS = ("p",)
STATS = ("G",)
WIDER = (">",)
NARROWER = ("<",)
TAG_BAR = ("f4",)

ADD = ("a",)
EDIT = ("e",)
DELETE = ("d",)
STATUS = ("s",)
SUBTASK = ("t",)
SEARCH = ("/",)
SORT_CREATED = ("f1",)
SORT_DUE = ("f2",)
SORT_PRIORITY = ("f3",)
TIME_LOG = ("l",)
BLOCKERS = ("b",)
FOCUS_LIST = ("1",)
FOCUS_DETAIL = ("2",)
DOWN = ("j", "down")
UP = ("k", "up")
ESCAPE = ("esc",)

HIDE = ("h",)
SHOW_HIDDEN = ("H",)

CONFIRM = ("y", "Y")
CANCEL = ("n", "N", "esc")

HELP_CLOSE = ("esc", "?", "q")
STATS_CLOSE = ("esc", "G", "q")

TAG_NEXT = ("l", "j", "right")
TAG_PREV = ("h", "k", "left")
TAG_DONE = ("enter", "esc")

PICK_TOGGLE = ("space", " ", "enter")

RESIZE_STEP = 0.05

HELP_LINES = [
    ("a", "add task / subtask / journal entry"),
    ("e", "edit"),
    ("d", "delete"),
    ("s", "cycle status / toggle subtask"),
    ("t", "add subtask"),
    ("l", "log time"),
    ("b", "blockers"),
    ("p", "focus timer"),
    ("/", "search"),
    ("f1 f2 f3", "sort by created / due / priority"),
    ("f4", "tag filter"),
    ("1 2", "focus list / detail"),
    ("tab", "next tab"),
    ("< >", "resize panels"),
    ("h H", "hide note / show hidden"),
    ("ctrl+z", "undo"),
    ("X", "export"),
    ("G", "stats"),
    ("?", "help"),
    ("q", "quit"),
]
