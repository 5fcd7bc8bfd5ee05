"""Sample lessons written to an empty content directory."""

SAMPLE_LESSONS = [
    {
        "lesson_id": "what-is-kubernetes",
        "title": "What is Kubernetes?",
        "description": "Why container orchestration exists and what Kubernetes does for you",
        "category": "fundamentals",
        "difficulty": "Beginner",
        "duration": "10 min",
        "topics": ["containers", "orchestration", "clusters"],
        "introduction": (
            "Kubernetes is an open-source system for running containerized "
            "applications across a cluster of machines. It schedules, scales "
            "and heals your workloads so you don't have to do it by hand."
        ),
        "key_points": [
            "Containers package an app with everything it needs to run",
            "Kubernetes decides where containers run and keeps them running",
            "You describe the desired state, Kubernetes makes it happen",
        ],
        "animation": {
            "title": "From Monolith to Containers",
            "description": "How applications moved from one big server to orchestrated containers",
            "scenes": [
                {
                    "title": "The Monolith",
                    "description": "One large application on one server. Any change means redeploying everything.",
                    "duration_ms": 4000,
                },
                {
                    "title": "Containers",
                    "description": "The app is split into small services, each packaged in its own container.",
                    "duration_ms": 4000,
                },
                {
                    "title": "The Orchestration Problem",
                    "description": "Hundreds of containers across many machines need placing, restarting and scaling.",
                    "duration_ms": 4000,
                },
                {
                    "title": "Kubernetes Takes the Helm",
                    "description": "Kubernetes schedules containers onto nodes and keeps the cluster in the desired state.",
                    "duration_ms": 4000,
                },
                {
                    "title": "The Benefits",
                    "description": "Self-healing, horizontal scaling and rolling updates with no downtime.",
                    "duration_ms": 3000,
                },
            ],
        },
        "code_example": None,
        "questions": [
            {
                "prompt": "What problem does Kubernetes primarily solve?",
                "options": [
                    "Writing application code",
                    "Designing databases",
                    "Running and managing containers at scale",
                    "Compiling programs",
                ],
                "correct_index": 2,
                "explanation": "Kubernetes orchestrates containers: scheduling, scaling and healing them across a cluster.",
            },
            {
                "prompt": "How do you tell Kubernetes what to run?",
                "options": [
                    "By logging into each node",
                    "By restarting the cluster",
                    "By emailing the operator",
                    "By declaring the desired state",
                ],
                "correct_index": 3,
                "explanation": "You declare what you want and Kubernetes continuously works to make reality match.",
            },
        ],
    },
    {
        "lesson_id": "pods-and-deployments",
        "title": "Pods and Deployments",
        "description": "The smallest deployable unit and the controller that manages it",
        "category": "workloads",
        "difficulty": "Beginner",
        "duration": "15 min",
        "topics": ["pods", "deployments", "replicasets"],
        "introduction": (
            "A Pod wraps one or more containers that share networking and "
            "storage. A Deployment keeps the right number of Pods running and "
            "rolls out new versions safely."
        ),
        "key_points": [
            "A Pod is the smallest thing Kubernetes schedules",
            "Deployments manage ReplicaSets, which manage Pods",
            "Changing a Deployment's template triggers a rolling update",
        ],
        "animation": {
            "title": "The Cooking Recipe",
            "description": "A Deployment is a recipe a chef follows to keep dishes on the table",
            "scenes": [
                {
                    "title": "Chef Instructions",
                    "description": "The Deployment says: always keep three plates of this dish ready.",
                    "duration_ms": 4000,
                },
                {
                    "title": "The Recipe Book",
                    "description": "The Pod template is the recipe every plate is cooked from.",
                    "duration_ms": 4000,
                },
                {
                    "title": "Self-Healing",
                    "description": "A plate is dropped. The chef notices and cooks a new one straight away.",
                    "duration_ms": 4000,
                },
                {
                    "title": "Version Control",
                    "description": "A new recipe arrives. Plates are swapped one at a time so diners always have food.",
                    "duration_ms": 4000,
                },
            ],
        },
        "code_example": {
            "title": "A simple Deployment",
            "code": (
                "apiVersion: apps/v1\n"
                "kind: Deployment\n"
                "metadata:\n"
                "  name: web\n"
                "spec:\n"
                "  replicas: 3\n"
                "  selector:\n"
                "    matchLabels:\n"
                "      app: web\n"
                "  template:\n"
                "    metadata:\n"
                "      labels:\n"
                "        app: web\n"
                "    spec:\n"
                "      containers:\n"
                "        - name: web\n"
                "          image: nginx:1.27\n"
                "          ports:\n"
                "            - containerPort: 80\n"
            ),
            "explanation": "replicas sets how many Pods to keep; template is the Pod every replica is created from.",
        },
        "questions": [
            {
                "prompt": "What is the smallest deployable unit in Kubernetes?",
                "options": ["Container", "Node", "Pod", "Deployment"],
                "correct_index": 2,
                "explanation": "Kubernetes schedules Pods, not bare containers.",
            },
            {
                "prompt": "What happens when a Pod managed by a Deployment crashes?",
                "options": [
                    "Nothing until an operator intervenes",
                    "The Deployment is deleted",
                    "A replacement Pod is created",
                    "The whole cluster restarts",
                ],
                "correct_index": 2,
                "explanation": "The ReplicaSet sees fewer Pods than desired and creates a new one.",
            },
            {
                "prompt": "Which field controls how many Pods a Deployment runs?",
                "options": ["spec.replicas", "metadata.name", "spec.selector", "kind"],
                "correct_index": 0,
                "explanation": "spec.replicas is the desired Pod count.",
            },
        ],
    },
    {
        "lesson_id": "labels-and-selectors",
        "title": "Labels and Selectors",
        "description": "Organizing and finding resources with key/value labels",
        "category": "fundamentals",
        "difficulty": "Intermediate",
        "duration": "12 min",
        "topics": ["labels", "selectors", "annotations"],
        "introduction": (
            "Labels are key/value pairs attached to objects. Selectors query "
            "those labels, which is how Services find Pods and Deployments "
            "find the Pods they own."
        ),
        "key_points": [
            "Labels identify, annotations describe",
            "Selectors match objects by their labels",
            "Services route traffic to Pods matching their selector",
        ],
        "animation": {
            "title": "Toy Organization with Labels",
            "description": "Sorting a messy toy box with sticky labels",
            "scenes": [
                {
                    "title": "Unorganized Toys",
                    "description": "A box full of toys and no way to find the red cars.",
                    "duration_ms": 3500,
                },
                {
                    "title": "Labels",
                    "description": "Every toy gets stickers like color=red and type=car.",
                    "duration_ms": 3500,
                },
                {
                    "title": "Selectors",
                    "description": "Ask for color=red,type=car and exactly the right toys come out.",
                    "duration_ms": 3500,
                },
                {
                    "title": "Annotations",
                    "description": "Notes like 'bought at the fair' describe toys but are never used to find them.",
                    "duration_ms": 3500,
                },
            ],
        },
        "code_example": {
            "title": "A Service selecting Pods",
            "code": (
                "apiVersion: v1\n"
                "kind: Service\n"
                "metadata:\n"
                "  name: web\n"
                "spec:\n"
                "  selector:\n"
                "    app: web\n"
                "  ports:\n"
                "    - port: 80\n"
                "      targetPort: 80\n"
            ),
            "explanation": "Traffic to the Service goes to every Pod labelled app=web.",
        },
        "questions": [
            {
                "prompt": "How does a Service know which Pods to send traffic to?",
                "options": [
                    "By Pod name",
                    "By label selector",
                    "By node IP",
                    "By creation time",
                ],
                "correct_index": 1,
                "explanation": "A Service's selector matches Pod labels.",
            },
            {
                "prompt": "Which should you use for non-identifying metadata such as a build URL?",
                "options": ["Labels", "Annotations"],
                "correct_index": 1,
                "explanation": "Annotations hold descriptive data that selectors never query.",
            },
        ],
    },
    {
        "lesson_id": "declarative-yaml",
        "title": "Declarative Configuration with YAML",
        "description": "Blueprints, spec versus status, and the reconciliation loop",
        "category": "configuration",
        "difficulty": "Advanced",
        "duration": "20 min",
        "topics": ["yaml", "reconciliation", "gitops"],
        "introduction": (
            "Every Kubernetes object has a spec you write and a status the "
            "cluster reports. Controllers run a loop that compares the two "
            "and acts until they match."
        ),
        "key_points": [
            "spec is desired state, status is observed state",
            "Controllers reconcile continuously, not once",
            "Manifests in Git make the desired state reviewable",
        ],
        "animation": {
            "title": "The Blueprint",
            "description": "Building from a blueprint and checking the house against it",
            "scenes": [
                {
                    "title": "Blueprint",
                    "description": "A manifest is a blueprint for what should exist.",
                    "duration_ms": 4000,
                },
                {
                    "title": "Spec vs Status",
                    "description": "The blueprint says three rooms; the inspector counts two.",
                    "duration_ms": 4000,
                },
                {
                    "title": "Reconciliation",
                    "description": "The builder adds a room and the inspector checks again, forever.",
                    "duration_ms": 4000,
                },
                {
                    "title": "YAML",
                    "description": "Blueprints are written in YAML so humans and tools can both read them.",
                    "duration_ms": 3500,
                },
                {
                    "title": "Git Repository",
                    "description": "Blueprints live in Git, so every change is reviewed and can be rolled back.",
                    "duration_ms": 3500,
                },
            ],
        },
        "code_example": None,
        "questions": [
            {
                "prompt": "Which part of an object do you write?",
                "options": ["status", "spec", "events", "uid"],
                "correct_index": 1,
                "explanation": "You write the spec; the cluster fills in status.",
            },
            {
                "prompt": "What does a controller do when status differs from spec?",
                "options": [
                    "Deletes the object",
                    "Raises an alert and stops",
                    "Acts to move status toward spec",
                    "Rewrites the spec",
                ],
                "correct_index": 2,
                "explanation": "That is the reconciliation loop.",
            },
        ],
    },
]
